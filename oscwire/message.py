"""OSC messages and bundles, and the typed arguments they carry."""

from __future__ import annotations

import math
import re
import struct
from decimal import Decimal

from .encoding import OSCError, encode_blob, encode_padded_string
from .timetag import Timetag

BUNDLE_TAG = "#bundle"


class _FixedInt(int):
    """An integer argument with a fixed width."""

    _BITS = 64

    def __new__(cls, value=0):
        number = int.__new__(cls, value)
        low = -(1 << (cls._BITS - 1))
        high = (1 << (cls._BITS - 1)) - 1
        if not low <= number <= high:
            raise ValueError(f"{int(number)} does not fit in {cls._BITS} bits")
        return number

    def __repr__(self):
        return f"{type(self).__name__}({int(self)})"

    def __str__(self):
        return int.__repr__(self)


class Int32(_FixedInt):
    """A 32-bit signed integer argument (type tag ``i``)."""

    _BITS = 32


class Int64(_FixedInt):
    """A 64-bit signed integer argument (type tag ``h``)."""

    _BITS = 64


def _to_float32(value):
    try:
        return struct.unpack(">f", struct.pack(">f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _format_float(value, single):
    """Format a float the shortest way, switching to exponent form like %g."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    if single:
        text = next(
            candidate
            for candidate in (f"{value:.{precision}e}" for precision in range(9))
            if _to_float32(float(candidate)) == value
        )
    else:
        text = repr(float(value))
    sign, digit_tuple, exponent = Decimal(text).as_tuple()
    digits = list(digit_tuple)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    mantissa = "".join(map(str, digits))
    point = len(digits) + exponent
    exp10 = point - 1
    prefix = "-" if sign else ""
    if exp10 < -4 or exp10 >= 6:
        body = mantissa[0] + ("." + mantissa[1:] if len(mantissa) > 1 else "")
        exp_sign = "-" if exp10 < 0 else "+"
        return f"{prefix}{body}e{exp_sign}{abs(exp10):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{mantissa}"
    if point >= len(mantissa):
        return prefix + mantissa + "0" * (point - len(mantissa))
    return f"{prefix}{mantissa[:point]}.{mantissa[point:]}"


class Float32(float):
    """A single precision float argument (type tag ``f``)."""

    def __new__(cls, value=0.0):
        return float.__new__(cls, _to_float32(float(value)))

    def __repr__(self):
        return f"Float32({float.__repr__(self)})"

    def __str__(self):
        return _format_float(float(self), single=True)


class Float64(float):
    """A double precision float argument (type tag ``d``)."""

    def __repr__(self):
        return f"Float64({float.__repr__(self)})"

    def __str__(self):
        return _format_float(float(self), single=False)


def get_type_tag(arg):
    """Return the OSC type tag character for ``arg``."""
    if isinstance(arg, bool):
        return "T" if arg else "F"
    if arg is None:
        return "N"
    if isinstance(arg, Int32):
        return "i"
    if isinstance(arg, Float32):
        return "f"
    if isinstance(arg, str):
        return "s"
    if isinstance(arg, (bytes, bytearray)):
        return "b"
    if isinstance(arg, Int64):
        return "h"
    if isinstance(arg, Float64):
        return "d"
    if isinstance(arg, Timetag):
        return "t"
    raise OSCError(f"unsupported type: {type(arg).__name__}")


_ENCODERS = {
    "T": lambda arg: b"",
    "F": lambda arg: b"",
    "N": lambda arg: b"",
    "i": lambda arg: struct.pack(">i", arg),
    "f": lambda arg: struct.pack(">f", arg),
    "s": encode_padded_string,
    "b": encode_blob,
    "h": lambda arg: struct.pack(">q", arg),
    "d": lambda arg: struct.pack(">d", arg),
    "t": lambda arg: arg.to_bytes(),
}

_PATTERN_TRANSLATIONS = (
    (".", r"\."),
    ("(", r"\("),
    (")", r"\)"),
    ("*", ".*"),
    ("{", "("),
    (",", "|"),
    ("}", ")"),
    ("?", "."),
)


def address_regex(pattern):
    """Compile an OSC address pattern into a regular expression."""
    for old, new in _PATTERN_TRANSLATIONS:
        pattern = pattern.replace(old, new)
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise OSCError(f"invalid address pattern: {exc}") from exc


def _describe_argument(arg):
    if isinstance(arg, bool):
        return "true" if arg else "false"
    if arg is None:
        return "Nil"
    if isinstance(arg, (bytes, bytearray)):
        return "blob"
    if isinstance(arg, Timetag):
        return str(arg.value)
    return str(arg)


def _same_argument(left, right):
    if isinstance(left, (bytes, bytearray)) and isinstance(right, (bytes, bytearray)):
        return left == right
    return type(left) is type(right) and left == right


class Message:
    """An OSC message: an address pattern and zero or more arguments."""

    __hash__ = None

    def __init__(self, address, *args):
        self.address = address
        self.arguments = list(args)

    def append(self, *args):
        """Append the given arguments."""
        self.arguments.extend(args)

    def clear(self):
        """Clear the address and all arguments."""
        self.address = ""
        self.clear_data()

    def clear_data(self):
        """Remove all arguments."""
        self.arguments.clear()

    def match(self, addr):
        """Return True if this message's address pattern matches ``addr``."""
        return address_regex(self.address).search(addr) is not None

    def type_tags(self):
        """Return the type tag string, starting with ','."""
        return "," + "".join(get_type_tag(arg) for arg in self.arguments)

    def count_arguments(self):
        """Return the number of arguments."""
        return len(self.arguments)

    def to_bytes(self):
        """Encode the message: address, type tag string, then arguments."""
        tags = [","]
        payload = bytearray()
        for arg in self.arguments:
            tag = get_type_tag(arg)
            tags.append(tag)
            payload += _ENCODERS[tag](arg)
        return (
            encode_padded_string(self.address)
            + encode_padded_string("".join(tags))
            + bytes(payload)
        )

    def __str__(self):
        try:
            tags = self.type_tags()
        except OSCError:
            return ""
        parts = [self.address, tags]
        parts.extend(_describe_argument(arg) for arg in self.arguments)
        return " ".join(parts)

    def __eq__(self, other):
        if not isinstance(other, Message):
            return NotImplemented
        return (
            self.address == other.address
            and len(self.arguments) == len(other.arguments)
            and all(map(_same_argument, self.arguments, other.arguments))
        )

    def __repr__(self):
        args = "".join(f", {arg!r}" for arg in self.arguments)
        return f"Message({self.address!r}{args})"


class Bundle:
    """An OSC bundle: a time tag followed by messages and nested bundles."""

    __hash__ = None

    def __init__(self, when):
        self.timetag = Timetag(when)
        self.messages = []
        self.bundles = []

    def append(self, packet):
        """Add a message or a bundle to this bundle."""
        if isinstance(packet, Bundle):
            self.bundles.append(packet)
        elif isinstance(packet, Message):
            self.messages.append(packet)
        else:
            raise OSCError(
                "unsupported OSC packet type: only Bundle and Message are supported"
            )

    def to_bytes(self):
        """Encode the bundle: tag, time tag, then size-prefixed elements."""
        data = bytearray(encode_padded_string(BUNDLE_TAG))
        data += self.timetag.to_bytes()
        for element in [*self.messages, *self.bundles]:
            encoded = element.to_bytes()
            data += struct.pack(">i", len(encoded))
            data += encoded
        return bytes(data)

    def __eq__(self, other):
        if not isinstance(other, Bundle):
            return NotImplemented
        return (self.timetag, self.messages, self.bundles) == (
            other.timetag,
            other.messages,
            other.bundles,
        )

    def __repr__(self):
        return (
            f"Bundle(timetag={self.timetag!r}, messages={self.messages!r}, "
            f"bundles={self.bundles!r})"
        )


def print_message(msg):
    """Print a message to standard output."""
    print(msg)