"""Dispatching of received OSC packets to message handlers."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from .encoding import OSCError
from .message import Bundle, Message

_FORBIDDEN_ADDRESS_CHARS = "*?,[]{}# "


class Dispatcher(ABC):
    """Something that receives every decoded OSC packet."""

    @abstractmethod
    def dispatch(self, packet):
        """Handle one packet (a Message, a Bundle or None)."""


class StandardDispatcher(Dispatcher):
    """Routes messages to the handlers registered for matching addresses.

    A handler is any callable taking a single Message. Bundles are delivered
    on a background timer once their time tag has expired.
    """

    def __init__(self):
        self._handlers = {}
        self._default_handler = None
        self._lock = threading.Lock()

    def add_msg_handler(self, addr, handler):
        """Register ``handler`` for the OSC address ``addr``.

        The address ``*`` sets the default handler, which receives every
        message. Other addresses may not contain pattern characters and may
        be registered only once.
        """
        if not callable(handler):
            raise TypeError("handler must be callable")
        with self._lock:
            if addr == "*":
                self._default_handler = handler
                return
            if any(char in addr for char in _FORBIDDEN_ADDRESS_CHARS):
                raise OSCError(
                    'OSC Address string may not contain any characters in "*?,[]{}#'
                )
            if addr in self._handlers:
                raise OSCError("OSC address exists already")
            self._handlers[addr] = handler

    def dispatch(self, packet):
        """Deliver a message now, or schedule a bundle for its time tag."""
        if isinstance(packet, Message):
            self._deliver(packet)
        elif isinstance(packet, Bundle):
            timer = threading.Timer(
                packet.timetag.expires_in(), self._deliver_bundle, args=(packet,)
            )
            timer.daemon = True
            timer.start()

    def _deliver(self, message):
        with self._lock:
            handlers = list(self._handlers.items())
            default = self._default_handler
        for address, handler in handlers:
            if message.match(address):
                handler(message)
        if default is not None:
            default(message)

    def _deliver_bundle(self, bundle):
        for message in bundle.messages:
            self._deliver(message)
        for nested in bundle.bundles:
            self.dispatch(nested)