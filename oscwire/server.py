"""A UDP server that receives OSC packets and hands them to a dispatcher."""

from __future__ import annotations

import selectors
import socket
import threading
import time

from .dispatcher import StandardDispatcher
from .parser import parse_packet

_MAX_PACKET_SIZE = 65535
_POLL_INTERVAL = 0.05
_MIN_RETRY_DELAY = 0.005
_MAX_RETRY_DELAY = 1.0
_TEMPORARY_ERRORS = (TimeoutError, BlockingIOError, InterruptedError)


def _split_address(addr):
    if isinstance(addr, tuple):
        return addr[0], int(addr[1])
    if not addr:
        return "", 0
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address: {addr!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port) if port else 0


def _bind(addr):
    host, port = _split_address(addr)
    infos = socket.getaddrinfo(
        host or None, port, type=socket.SOCK_DGRAM, flags=socket.AI_PASSIVE
    )
    infos.sort(key=lambda info: info[0] != socket.AF_INET)
    family, kind, proto, _, sockaddr = infos[0]
    sock = socket.socket(family, kind, proto)
    try:
        sock.bind(sockaddr)
    except OSError:
        sock.close()
        raise
    return sock


class Server:
    """Listens on ``addr`` ("host:port") for OSC packets over UDP.

    ``read_timeout`` is in seconds; None or 0 means reads never time out.
    ``ready`` is set and ``local_address`` filled in once the server is
    listening.
    """

    def __init__(self, addr="", dispatcher=None, read_timeout=None):
        self.addr = addr
        self.dispatcher = dispatcher
        self.read_timeout = read_timeout
        self.ready = threading.Event()
        self.local_address = None
        self._sock = None
        self._closing = threading.Event()
        self._lock = threading.Lock()

    def listen_and_serve(self):
        """Bind to ``addr`` and serve until the connection is closed."""
        try:
            if self.dispatcher is None:
                self.dispatcher = StandardDispatcher()
            sock = _bind(self.addr)
            with self._lock:
                self._sock = sock
                self._closing = threading.Event()
            self.local_address = sock.getsockname()[:2]
            self.ready.set()
            self.serve(sock)
        finally:
            self.close_connection()

    def serve(self, sock):
        """Read packets from ``sock`` and dispatch each on its own thread.

        Returns when the connection is closed with close_connection; any
        other read or decoding error is raised.
        """
        if self.dispatcher is None:
            self.dispatcher = StandardDispatcher()
        closing = self._closing
        delay = 0.0
        with selectors.DefaultSelector() as selector:
            selector.register(sock, selectors.EVENT_READ)
            while not closing.is_set():
                try:
                    if not selector.select(_POLL_INTERVAL):
                        continue
                    packet = self._read_from(sock)
                except _TEMPORARY_ERRORS:
                    delay = min(_MAX_RETRY_DELAY, delay * 2 if delay else _MIN_RETRY_DELAY)
                    time.sleep(delay)
                    continue
                except (OSError, ValueError):
                    if closing.is_set():
                        return
                    raise
                delay = 0.0
                threading.Thread(
                    target=self.dispatcher.dispatch, args=(packet,), daemon=True
                ).start()

    def close_connection(self):
        """Close the connection opened by listen_and_serve, if any."""
        with self._lock:
            sock, self._sock = self._sock, None
        if sock is None:
            return
        self._closing.set()
        sock.close()

    def receive_packet(self, sock):
        """Wait for one packet on ``sock`` and return it decoded."""
        return self._read_from(sock)

    def _read_from(self, sock):
        if self.read_timeout:
            sock.settimeout(self.read_timeout)
        data, _ = sock.recvfrom(_MAX_PACKET_SIZE)
        return parse_packet(data)