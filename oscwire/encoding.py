"""Low-level OSC wire encoding: padded strings, blobs and a byte reader."""

from __future__ import annotations

import struct

_TEXT_ENCODING = "utf-8"
_TEXT_ERRORS = "surrogateescape"


class OSCError(ValueError):
    """Raised when OSC data cannot be encoded or decoded."""


class PacketReader:
    """Sequential reader over the bytes of one OSC packet."""

    def __init__(self, data):
        self._data = bytes(data)
        self._pos = 0

    def remaining(self):
        """Return the number of bytes not yet consumed."""
        return len(self._data) - self._pos

    def peek(self, size):
        """Return the next ``size`` bytes without consuming them."""
        if size < 0:
            raise ValueError("size must not be negative")
        if size > self.remaining():
            raise OSCError("unexpected end of data")
        return self._data[self._pos:self._pos + size]

    def read(self, size):
        """Consume and return exactly ``size`` bytes."""
        chunk = self.peek(size)
        self._pos += size
        return chunk

    def read_until_null(self):
        """Consume bytes up to and including the next null byte."""
        end = self._data.find(b"\x00", self._pos)
        if end < 0:
            self._pos = len(self._data)
            raise OSCError("unexpected end of data: missing null terminator")
        chunk = self._data[self._pos:end + 1]
        self._pos = end + 1
        return chunk

    def _skip_padding(self, count):
        # Padding may be cut short at the end of the data, but some must be there.
        available = min(count, self.remaining())
        if available == 0:
            raise OSCError("unexpected end of data while skipping padding")
        self._pos += available


def pad_bytes_needed(element_len):
    """Return how many bytes fill ``element_len`` up to a multiple of four."""
    return (4 - (element_len % 4)) % 4


def encode_padded_string(text):
    """Encode ``text`` as a null-terminated OSC string padded to four bytes."""
    raw = text.encode(_TEXT_ENCODING, _TEXT_ERRORS)
    null_index = raw.find(b"\x00")
    if null_index > 0:
        raw = raw[:null_index]
    raw += b"\x00"
    return raw + b"\x00" * pad_bytes_needed(len(raw))


def read_padded_string(reader):
    """Read a padded OSC string; return the text and the bytes it occupied."""
    raw = reader.read_until_null()
    consumed = len(raw)
    padding = pad_bytes_needed(consumed)
    if padding:
        consumed += padding
        reader._skip_padding(padding)
    return raw[:-1].decode(_TEXT_ENCODING, _TEXT_ERRORS), consumed


def encode_blob(data):
    """Encode ``data`` as an OSC blob: size, contents and padding."""
    data = bytes(data)
    try:
        header = struct.pack(">i", len(data))
    except struct.error as exc:
        raise OSCError(f"blob too large: {len(data)} bytes") from exc
    return header + data + b"\x00" * pad_bytes_needed(len(data))


def read_blob(reader):
    """Read an OSC blob; return its contents and the bytes it occupied."""
    (length,) = struct.unpack(">i", reader.read(4))
    if length < 1 or length > reader.remaining():
        raise OSCError(f"invalid blob length {length}")
    blob = reader.read(length)
    consumed = 4 + length
    padding = pad_bytes_needed(length)
    if padding:
        consumed += padding
        reader._skip_padding(padding)
    return blob, consumed