"""Transport layer implementations."""

from .base import (
    Transport,
    TransportError,
    TransportConnectionError,
    TransportClosed,
    SocketClosed,
)

from .websocket import WebSocketTransport
