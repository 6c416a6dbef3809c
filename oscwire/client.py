"""A UDP client for sending OSC messages and bundles."""

from __future__ import annotations

import socket


def _resolve(host, port):
    infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    infos.sort(key=lambda info: info[0] != socket.AF_INET)
    family, kind, proto, _, sockaddr = infos[0]
    return family, kind, proto, sockaddr


class Client:
    """Sends OSC packets over UDP to a fixed host and port.

    ``ip`` and ``port`` record the target given at construction; the
    connection itself is made once, when the client is created.
    """

    def __init__(self, ip, port):
        self.ip = ip
        self.port = port
        self.local_addr = None
        family, kind, proto, remote = _resolve(ip, port)
        self._sock = socket.socket(family, kind, proto)
        try:
            self._sock.connect(remote)
        except OSError:
            self._sock.close()
            raise

    def set_local_addr(self, ip, port):
        """Resolve and record a local address as a (host, port) pair."""
        self.local_addr = _resolve(ip, port)[3][:2]

    def send(self, packet):
        """Encode and send a Message or a Bundle."""
        self._sock.send(packet.to_bytes())

    def close(self):
        """Close the underlying connection."""
        self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()