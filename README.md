# oscwire

Send and receive Open Sound Control (OSC 1.0) packets over UDP.

An OSC packet is either a **message**, made of an address pattern, a type tag
string and zero or more arguments, or a **bundle**, made of a time tag and
any number of messages and nested bundles.

The package has no dependencies outside the standard library.

## Argument types

Arguments are typed explicitly, so that every value has exactly one wire
encoding. Plain `int` and `float` values are rejected with `OSCError`; wrap
them in one of the types below.

| Tag | Python value |
|-----|--------------|
| `i` | `oscwire.message.Int32` |
| `h` | `oscwire.message.Int64` |
| `f` | `oscwire.message.Float32` |
| `d` | `oscwire.message.Float64` |
| `s` | `str` |
| `b` | `bytes` or `bytearray` (blob) |
| `t` | `oscwire.timetag.Timetag` |
| `T` / `F` | `True` / `False` |
| `N` | `None` |

`Int32` and `Int64` raise `ValueError` when the value does not fit;
`Float32` rounds to single precision.

## Messages

```python
from oscwire.message import Message, Int32

msg = Message("/osc/address", Int32(111))
msg.append(True, "hello")

msg.type_tags()        # ',iTs'
msg.count_arguments()  # 3
str(msg)               # '/osc/address ,iTs 111 true hello'
data = msg.to_bytes()
```

`clear()` empties the address and the arguments; `clear_data()` removes only
the arguments. Two messages are equal when their addresses and their
arguments, including argument types, are equal.

`msg.match(addr)` treats the message's address as a pattern and reports
whether it matches `addr`. In the pattern, `*` matches any run of
characters, `?` any one character, `{foo,bar}` either alternative, and
`[...]` a character set. The match is case sensitive and may occur anywhere
in `addr`. `address_regex(pattern)` returns the compiled expression.

## Bundles and time tags

A bundle is made with the time at which its contents should be handled: an
aware `datetime`, an integer number of nanoseconds since the Unix epoch, or
`None` for "immediately".

```python
from datetime import datetime, timezone

from oscwire.message import Bundle, Message

bundle = Bundle(datetime.now(timezone.utc))
bundle.append(Message("/synth/1/freq"))
bundle.append(Message("/synth/1/gate", True))
data = bundle.to_bytes()
```

`Bundle.append` accepts a `Message` or a nested `Bundle` and raises
`OSCError` for anything else.

`oscwire.timetag.Timetag` holds the 64-bit NTP-style value (`value`), the
time it came from (`time`, in nanoseconds, and `datetime`), and offers
`seconds_since_epoch()`, `fractional_second()`, `to_bytes()`, `set_time()`
and `expires_in()`, the number of seconds until the tagged time (0.0 once it
has passed). `time_to_timetag()` and `timetag_to_time()` convert between the
two forms.

## Decoding

```python
from oscwire.message import Message
from oscwire.parser import parse_packet

packet = parse_packet(Message("/d/e/f", "foo").to_bytes())
print(packet)          # /d/e/f ,s foo
```

`parse_packet` accepts `bytes` (or a `str` of raw bytes) and returns a
`Message`, a `Bundle`, or `None` when the data starts with neither `/` nor
`#`. Malformed data raises `oscwire.encoding.OSCError`, a subclass of
`ValueError`.

The low-level helpers in `oscwire.encoding` (`encode_padded_string`,
`read_padded_string`, `encode_blob`, `read_blob`, `pad_bytes_needed` and the
`PacketReader` they read from) are available for custom formats.

## Sending

```python
from oscwire.client import Client
from oscwire.message import Message, Int32

with Client("localhost", 8765) as client:
    client.send(Message("/osc/address", Int32(111), True, "hello"))
```

The client connects its UDP socket when it is created. `set_local_addr(ip,
port)` resolves the given address and records it in `local_addr`; it does not
rebind the socket.

## Receiving

A `StandardDispatcher` calls every registered handler whose address the
incoming message's pattern matches, and then the default handler registered
under `*`, if any. Handlers are callables taking one `Message`. Other
addresses may not contain any of `*?,[]{}#` or a space, and each may be
registered once; both mistakes raise `OSCError`. Bundles are delivered on a
background timer once their time tag has passed.

```python
from oscwire.dispatcher import StandardDispatcher
from oscwire.message import print_message
from oscwire.server import Server

dispatcher = StandardDispatcher()
dispatcher.add_msg_handler("/message/address", print_message)

server = Server(addr="127.0.0.1:8765", dispatcher=dispatcher)
server.listen_and_serve()
```

`listen_and_serve()` blocks, dispatching each packet on its own thread, until
`close_connection()` is called from another thread. Once it is listening,
`server.ready` is set and `server.local_address` holds the bound address
(useful with port 0). Without a dispatcher the server makes a
`StandardDispatcher`.

To read packets one at a time from a socket you already have, use
`server.receive_packet(sock)`; with `read_timeout` (in seconds) set on the
server, a read that waits longer raises `TimeoutError`. Any class with a
`dispatch(packet)` method derived from `oscwire.dispatcher.Dispatcher` can
take the place of the standard dispatcher.

## Command-line tools

Print every packet that arrives on UDP port 8765 of 127.0.0.1:

```
oscwire-debug-server 8765
```

Send random test messages and bundles to a port on `localhost`; type `m` for a
message, `b` for a bundle and `q` to quit:

```
oscwire-send 8765
```

The functions behind them, `format_packet` and `Debugger` in
`oscwire.debugserver`, and `random_message` and `random_bundle` in
`oscwire.sender`, can also be used directly.

## Limitations

- Only UDP is supported; there is no TCP or SLIP-framed transport.
- A packet is read in one datagram of at most 65535 bytes.
- Only the argument types listed above are understood; other type tags raise
  `OSCError` when decoding.