"""OSC time tags: 64-bit NTP-style fixed point timestamps.

Times are given either as an aware ``datetime`` or as an integer number of
nanoseconds since the Unix epoch; ``None`` stands for "immediately".
"""

from __future__ import annotations

import struct
from datetime import datetime, timedelta, timezone
from time import time_ns

SECONDS_FROM_1900_TO_1970 = 2208988800
NANOSECONDS_PER_FRACTION = 0.23283064365386962891
IMMEDIATELY = 1

_UINT32 = (1 << 32) - 1
_UINT64 = (1 << 64) - 1
_NANOS = 10**9
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _to_nanoseconds(when):
    if when is None:
        return None
    if isinstance(when, datetime):
        if when.tzinfo is None:
            when = when.astimezone()
        delta = when - _EPOCH
        return (delta.days * 86400 + delta.seconds) * _NANOS + delta.microseconds * 1000
    if isinstance(when, bool) or not isinstance(when, int):
        raise TypeError(f"unsupported time value: {when!r}")
    return when


def time_to_timetag(when):
    """Convert a time (datetime, nanoseconds or None) to an OSC time tag."""
    nanoseconds = _to_nanoseconds(when)
    if nanoseconds is None:
        return IMMEDIATELY
    seconds, nanos = divmod(nanoseconds, _NANOS)
    seconds = (seconds + SECONDS_FROM_1900_TO_1970) & _UINT64
    fraction = int(nanos / NANOSECONDS_PER_FRACTION) & _UINT32
    return ((seconds << 32) + fraction) & _UINT64


def timetag_to_time(timetag):
    """Convert an OSC time tag to nanoseconds since the Unix epoch, or None."""
    if not 0 <= timetag <= _UINT64:
        raise ValueError(f"time tag out of range: {timetag}")
    if timetag == IMMEDIATELY:
        return None
    seconds = (timetag >> 32) - SECONDS_FROM_1900_TO_1970
    nanos = int(NANOSECONDS_PER_FRACTION * float(timetag & _UINT32))
    return seconds * _NANOS + nanos


class Timetag:
    """An OSC time tag together with the time it was made from."""

    MIN_VALUE = IMMEDIATELY

    __slots__ = ("_time", "_value")

    def __init__(self, when):
        self.set_time(when)

    @classmethod
    def from_timetag(cls, value):
        """Build a Timetag from a raw 64-bit time tag value."""
        return cls(timetag_to_time(value))

    @property
    def time(self):
        """Nanoseconds since the Unix epoch, or None for "immediately"."""
        return self._time

    @property
    def datetime(self):
        """The time as an aware UTC datetime (microsecond precision), or None."""
        if self._time is None:
            return None
        return _EPOCH + timedelta(microseconds=self._time // 1000)

    @property
    def value(self):
        """The raw 64-bit time tag."""
        return self._value

    def fractional_second(self):
        """Return the low 32 bits: the fractional part of a second."""
        return self._value & _UINT32

    def seconds_since_epoch(self):
        """Return the high 32 bits: seconds since midnight, 1 January 1900."""
        return self._value >> 32

    def to_bytes(self):
        """Encode the time tag as eight big-endian bytes."""
        return struct.pack(">Q", self._value)

    def set_time(self, when):
        """Set the time, recomputing the time tag."""
        self._time = _to_nanoseconds(when)
        self._value = time_to_timetag(self._time)

    def expires_in(self):
        """Return the seconds until the tagged time, or 0.0 if it has passed."""
        if self._value <= IMMEDIATELY:
            return 0.0
        target = timetag_to_time(self._value)
        remaining = (target - time_ns()) / _NANOS
        return remaining if remaining > 0 else 0.0

    def __eq__(self, other):
        if not isinstance(other, Timetag):
            return NotImplemented
        return (self._value, self._time) == (other._value, other._time)

    def __hash__(self):
        return hash((self._value, self._time))

    def __repr__(self):
        return f"Timetag(value={self._value}, time={self._time})"