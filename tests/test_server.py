import random
import socket
import threading

import pytest

from oscwire.client import Client
from oscwire.dispatcher import StandardDispatcher
from oscwire.encoding import OSCError
from oscwire.message import Bundle, Int32, Message
from oscwire.server import Server

_CHARSET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def random_string(length, seed=7):
    rng = random.Random(seed)
    return "".join(rng.choice(_CHARSET) for _ in range(length))


@pytest.fixture
def udp_socket():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5)
    yield sock
    sock.close()


def _run_in_thread(server):
    outcome = {}

    def run():
        try:
            outcome["result"] = server.listen_and_serve()
        except BaseException as exc:  # recorded for the test to inspect
            outcome["error"] = exc

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread, outcome


def test_server_message_dispatching():
    string_argument = random_string(500)
    received = []
    done = threading.Event()

    d = StandardDispatcher()

    def handler(msg):
        received.append(msg)
        done.set()

    d.add_msg_handler("/address/test", handler)
    server = Server("127.0.0.1:0", d)
    thread, outcome = _run_in_thread(server)
    try:
        assert server.ready.wait(5)
        with Client("127.0.0.1", server.local_address[1]) as client:
            client.send(Message("/address/test", Int32(1122), string_argument))
        assert done.wait(5)
    finally:
        server.close_connection()
    thread.join(5)
    assert not thread.is_alive()
    assert "error" not in outcome
    (msg,) = received
    assert msg.count_arguments() == 2
    assert msg.arguments[0] == 1122
    assert msg.arguments[1] == string_argument


def test_server_dispatches_bundle():
    received = []
    done = threading.Event()
    d = StandardDispatcher()

    def handler(msg):
        received.append(msg)
        done.set()

    d.add_msg_handler("/in/bundle", handler)
    server = Server("127.0.0.1:0", d)
    thread, outcome = _run_in_thread(server)
    try:
        assert server.ready.wait(5)
        bundle = Bundle(None)
        bundle.append(Message("/in/bundle", "x"))
        with Client("127.0.0.1", server.local_address[1]) as client:
            client.send(bundle)
        assert done.wait(5)
    finally:
        server.close_connection()
    thread.join(5)
    assert [msg.arguments for msg in received] == [["x"]]


def test_listen_and_serve_rejects_address_without_port():
    server = Server("nocolon")
    with pytest.raises(ValueError):
        server.listen_and_serve()


def test_server_message_receiving(udp_socket):
    string_argument = random_string(500, seed=11)
    port = udp_socket.getsockname()[1]
    with Client("127.0.0.1", port) as client:
        client.send(Message("/address/test", Int32(1122), Int32(3344), string_argument))
    packet = Server().receive_packet(udp_socket)
    assert isinstance(packet, Message)
    assert packet.count_arguments() == 3
    assert packet.arguments[0] == 1122
    assert packet.arguments[1] == 3344
    assert packet.arguments[2] == string_argument


def test_read_timeout(udp_socket):
    server = Server(read_timeout=0.3)
    port = udp_socket.getsockname()[1]
    with Client("127.0.0.1", port) as client:
        client.send(Message("/address/test1"))
        first = server.receive_packet(udp_socket)
        assert first.address == "/address/test1"

        with pytest.raises(TimeoutError):
            server.receive_packet(udp_socket)

        client.send(Message("/address/test2"))
        second = server.receive_packet(udp_socket)
    assert second.address == "/address/test2"


def test_serve_raises_on_malformed_packet(udp_socket):
    server = Server(dispatcher=StandardDispatcher())
    port = udp_socket.getsockname()[1]
    with Client("127.0.0.1", port) as client:
        client._sock.send(b"/abc")
    with pytest.raises(OSCError):
        server.serve(udp_socket)


def test_close_connection_without_connection_is_noop():
    server = Server()
    assert server.close_connection() is None
    assert server.local_address is None
    assert not server.ready.is_set()