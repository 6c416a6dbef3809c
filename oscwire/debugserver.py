"""A receiving server that prints every OSC message and bundle it gets."""

from __future__ import annotations

import os
import re
import sys

from .dispatcher import Dispatcher
from .message import Bundle, Message
from .server import Server

_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1
_INTEGER = re.compile(r"[+-]?[0-9]+")


def indent(text, indent_level):
    """Prefix every line of ``text`` with two spaces per indent level."""
    indentation = "  " * indent_level
    return "\n".join(indentation + line for line in text.split("\n"))


def _bundle_time(bundle):
    when = bundle.timetag.datetime
    return "immediately" if when is None else str(when)


def format_packet(packet, indent_level):
    """Describe a packet as text; nested bundle contents are indented."""
    if isinstance(packet, Message):
        return f"-- OSC Message: {packet}"
    if isinstance(packet, Bundle):
        lines = [f"-- OSC Bundle ({_bundle_time(packet)}):"]
        lines.extend(
            indent(f"-- OSC Message #{number}: {message}", indent_level + 1)
            for number, message in enumerate(packet.messages, start=1)
        )
        lines.extend(
            indent(format_packet(nested, 0), indent_level + 1)
            for nested in packet.bundles
        )
        return "\n".join(lines)
    return "Unknown packet type!"


class Debugger(Dispatcher):
    """A dispatcher that prints each packet as it arrives."""

    def dispatch(self, packet):
        """Print the packet, followed by a blank line."""
        if packet is not None:
            print(format_packet(packet, 0) + "\n")


def _program_name():
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "debugserver"


def _print_usage():
    print(f"Usage: {_program_name()} PORT")


def _parse_port(text):
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid port {text!r}: not an integer")
    port = int(text)
    if not _INT32_MIN <= port <= _INT32_MAX:
        raise ValueError(f"invalid port {text!r}: value out of range")
    return port


def main(argv=None):
    """Listen on 127.0.0.1:PORT and print every packet received."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        _print_usage()
        return 1
    try:
        port = _parse_port(args[0])
    except ValueError as exc:
        print(exc)
        _print_usage()
        return 1

    server = Server(addr=f"127.0.0.1:{port}", dispatcher=Debugger())
    print("### Welcome to go-osc receiver demo")
    print(f"Listening via UDP on port {port}...")
    try:
        server.listen_and_serve()
    except (OSError, ValueError) as exc:
        print(exc)
        return 1
    except KeyboardInterrupt:
        server.close_connection()
    return 0


if __name__ == "__main__":
    sys.exit(main())