"""Decoding of OSC packets from their wire format."""

from __future__ import annotations

import struct

from .encoding import OSCError, PacketReader, read_blob, read_padded_string
from .message import BUNDLE_TAG, Bundle, Float32, Float64, Int32, Int64, Message
from .timetag import Timetag, timetag_to_time

_FIXED_TYPES = {
    "i": (">i", 4, Int32),
    "h": (">q", 8, Int64),
    "f": (">f", 4, Float32),
    "d": (">d", 8, Float64),
}

_CONSTANTS = {"N": None, "T": True, "F": False}


def parse_packet(data):
    """Parse bytes (or a str of raw bytes) into a Message, a Bundle or None."""
    if isinstance(data, str):
        data = data.encode("utf-8", "surrogateescape")
    return read_packet(PacketReader(data))


def read_packet(reader):
    """Read one packet; return None if it is neither a message nor a bundle."""
    first = reader.peek(1)
    if first == b"/":
        return read_message(reader)
    if first == b"#":
        return read_bundle(reader)
    return None


def read_bundle(reader):
    """Read a bundle and every element that follows it in ``reader``."""
    start_tag, _ = read_padded_string(reader)
    if start_tag != BUNDLE_TAG:
        raise OSCError(f"invalid bundle start tag: {start_tag}")
    (value,) = struct.unpack(">Q", reader.read(8))
    bundle = Bundle(timetag_to_time(value))
    while reader.remaining() > 0:
        reader.read(4)  # element size; elements are read by their own structure
        bundle.append(read_packet(reader))
    return bundle


def read_message(reader):
    """Read a message: its address followed by its arguments."""
    address, _ = read_padded_string(reader)
    message = Message(address)
    _read_arguments(message, reader)
    return message


def _read_arguments(message, reader):
    typetags, _ = read_padded_string(reader)
    if not typetags:
        return
    if typetags[0] != ",":
        raise OSCError(f"unsupported type tag string {typetags}")
    for tag in typetags[1:]:
        if tag in _FIXED_TYPES:
            fmt, size, kind = _FIXED_TYPES[tag]
            (value,) = struct.unpack(fmt, reader.read(size))
            message.append(kind(value))
        elif tag == "s":
            text, _ = read_padded_string(reader)
            message.append(text)
        elif tag == "b":
            blob, _ = read_blob(reader)
            message.append(blob)
        elif tag == "t":
            try:
                raw = reader.read(8)
            except OSCError:
                # A truncated time tag ends the argument list silently.
                return
            (value,) = struct.unpack(">Q", raw)
            message.append(Timetag.from_timetag(value))
        elif tag in _CONSTANTS:
            message.append(_CONSTANTS[tag])
        else:
            raise OSCError(f"unsupported type tag: {tag}")