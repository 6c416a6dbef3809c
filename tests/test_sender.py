import io
import random
import re
import socket

import pytest

from oscwire.message import Bundle, Message
from oscwire.parser import parse_packet
from oscwire.sender import main, random_bundle, random_message

_ALLOWED_TAGS = set("ifsbtTFN")


def _all_messages(bundle):
    yield from bundle.messages
    for nested in bundle.bundles:
        yield from _all_messages(nested)


@pytest.mark.parametrize("seed", range(20))
def test_random_message_shape(seed):
    msg = random_message("/x/y", random.Random(seed))
    assert msg.address == "/x/y"
    assert 1 <= msg.count_arguments() <= 5
    tags = msg.type_tags()
    assert tags[0] == ","
    assert set(tags[1:]) <= _ALLOWED_TAGS


@pytest.mark.parametrize("seed", range(20))
def test_random_message_round_trips(seed):
    msg = random_message("/x/y", random.Random(seed))
    parsed = parse_packet(msg.to_bytes())
    assert isinstance(parsed, Message)
    assert parsed.address == msg.address
    assert parsed.type_tags() == msg.type_tags()


def test_random_message_strings_have_prefix():
    rng = random.Random(7)
    texts = [
        arg
        for _ in range(30)
        for arg in random_message("/s", rng).arguments
        if isinstance(arg, str)
    ]
    assert texts
    assert all(text.startswith("test string ") for text in texts)


def test_random_message_is_deterministic_for_seed():
    first = random_message("/a", random.Random(42))
    second = random_message("/a", random.Random(42))
    assert first.type_tags() == second.type_tags()


@pytest.mark.parametrize("seed", range(20))
def test_random_bundle_shape(seed):
    bundle = random_bundle(random.Random(seed))
    assert 1 <= len(bundle.messages) + len(bundle.bundles) <= 5
    for msg in _all_messages(bundle):
        assert re.fullmatch(r"/bundle/message/[1-5]", msg.address)


@pytest.mark.parametrize("seed", range(20))
def test_random_bundle_round_trips(seed):
    bundle = random_bundle(random.Random(seed))
    parsed = parse_packet(bundle.to_bytes())
    assert isinstance(parsed, Bundle)
    assert len(parsed.messages) == len(bundle.messages)
    assert len(parsed.bundles) == len(bundle.bundles)
    assert [m.address for m in parsed.messages] == [m.address for m in bundle.messages]


@pytest.mark.parametrize("argv", [[], ["1", "2"]])
def test_main_wrong_argument_count(argv, capsys):
    assert main(argv) == 1
    assert "Usage:" in capsys.readouterr().out


def test_main_invalid_port(capsys):
    assert main(["port"]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_main_sends_packets(monkeypatch, capsys):
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as receiver:
        receiver.bind(("127.0.0.1", 0))
        receiver.settimeout(5)
        port = receiver.getsockname()[1]
        monkeypatch.setattr("sys.stdin", io.StringIO("m\nx\nb\nq\nm\n"))
        assert main([str(port)]) == 0
        first = parse_packet(receiver.recv(65535))
        second = parse_packet(receiver.recv(65535))
    assert isinstance(first, Message)
    assert first.address == "/message/address"
    assert isinstance(second, Bundle)
    assert "Exit!" in capsys.readouterr().out


def test_main_stops_at_end_of_input(monkeypatch, capsys):
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as receiver:
        receiver.bind(("127.0.0.1", 0))
        port = receiver.getsockname()[1]
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        assert main([str(port)]) == 0
    assert "Exit!" not in capsys.readouterr().out