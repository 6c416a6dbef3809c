"""An interactive sender of random OSC messages and bundles."""

from __future__ import annotations

import os
import random
import re
import sys
import time

from .client import Client
from .message import Bundle, Float32, Int32, Message
from .timetag import Timetag

_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1
_INTEGER = re.compile(r"[+-]?[0-9]+")
_PROMPT = "# "


def _test_string(rng):
    return f"test string {rng.randrange(1000)}"


_ARGUMENT_MAKERS = (
    lambda rng: Int32(rng.randrange(100000)),
    lambda rng: Float32(rng.random() * 100000),
    _test_string,
    lambda rng: _test_string(rng).encode(),
    lambda rng: Timetag(time.time_ns()),
    lambda rng: True,
    lambda rng: False,
    lambda rng: None,
)


def random_message(address, rng=None):
    """Build a message for ``address`` with one to five random arguments."""
    rng = rng if rng is not None else random.Random()
    message = Message(address)
    for _ in range(1 + rng.randrange(5)):
        message.append(rng.choice(_ARGUMENT_MAKERS)(rng))
    return message


def random_bundle(rng=None):
    """Build a bundle of one to five random messages and nested bundles."""
    rng = rng if rng is not None else random.Random()
    bundle = Bundle(time.time_ns())
    for number in range(1, 2 + rng.randrange(5)):
        if rng.random() < 0.25:
            bundle.append(random_bundle(rng))
        else:
            bundle.append(random_message(f"/bundle/message/{number}", rng))
    return bundle


def _usage():
    name = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "sender"
    return f"Usage: {name} PORT"


def _parse_port(text):
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid port {text!r}: not an integer")
    port = int(text)
    if not _INT32_MIN <= port <= _INT32_MAX:
        raise ValueError(f"invalid port {text!r}: value out of range")
    return port


def main(argv=None):
    """Read commands from standard input and send random packets to PORT."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print(_usage())
        return 1
    try:
        port = _parse_port(args[0])
    except ValueError as exc:
        print(exc)
        print(_usage())
        return 1

    try:
        client = Client("localhost", port)
    except (OSError, OverflowError) as exc:
        print(f"Error: {exc}")
        return 1

    rng = random.Random()
    with client:
        print("### Welcome to go-osc transmitter demo")
        print("Please, select the OSC packet type you would like to send:")
        print("\tm: OSCMessage")
        print("\tb: OSCBundle")
        print('\tPress "q" to exit')
        print(_PROMPT, end="", flush=True)
        try:
            for line in sys.stdin:
                command = line.rstrip("\n")
                packet = None
                if command == "m":
                    packet = random_message("/message/address", rng)
                elif command == "b":
                    packet = random_bundle(rng)
                elif command == "q":
                    print("Exit!")
                    return 0
                if packet is not None:
                    try:
                        client.send(packet)
                    except OSError as exc:
                        print(exc)
                print(_PROMPT, end="", flush=True)
        except OSError as exc:
            print(f"Error: {exc}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())