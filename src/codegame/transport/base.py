"""Transport interface.

A transport carries text frames between a :class:`codegame.Socket` and the
game server. Everything above this layer deals in decoded events; everything
below it deals in connections and frames.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportConnectionError(TransportError):
    """The transport could not establish a connection."""


class TransportClosed(TransportError):
    """The connection was closed cleanly, by either side."""


class SocketClosed(TransportClosed):
    """Terminal state of a socket whose connection closed cleanly."""


class Transport(ABC):
    """Minimal contract for a duplex, ordered, text-framed transport."""

    @abstractmethod
    def open(self) -> None:
        """Establish the underlying connection."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying connection."""

    @abstractmethod
    def send(self, frame: str) -> None:
        """Send a single text frame."""

    @abstractmethod
    def recv(self) -> str:
        """Receive the next text frame.

        Raises :class:`codegame.protocol.message.InvalidMessageType` for a
        frame that is not text, :class:`TransportClosed` on a clean close,
        and :class:`TransportError` for anything else.
        """

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently connected."""
        return False
