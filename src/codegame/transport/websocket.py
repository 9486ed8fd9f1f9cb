"""Websocket transport.

A thin adapter from the websockets synchronous client to the
:class:`~codegame.transport.base.Transport` contract. The synchronous
client is used because the socket runtime is thread based: one background
thread reads, the caller's thread writes.
"""

from __future__ import annotations

import logging
from typing import Optional

import websockets.exceptions
from websockets.sync.client import ClientConnection, connect

from ..protocol.message import InvalidMessageType
from .base import (
    Transport,
    TransportClosed,
    TransportConnectionError,
    TransportError,
)


logger = logging.getLogger(__name__)


class WebSocketTransport(Transport):
    """Text-framed websocket connection to *url* (``ws://`` or ``wss://``)."""

    close_timeout = 5
    open_timeout = 10

    def __init__(self, url: str):
        self.url = url
        self.connection: Optional[ClientConnection] = None
        self.closed = False

    def __repr__(self) -> str:
        return f"WebSocketTransport({self.url!r})"

    @property
    def is_open(self) -> bool:
        return self.connection is not None and not self.closed

    def open(self) -> None:
        if self.closed:
            raise TransportClosed("websocket connection is closed")
        if self.connection is not None:
            return

        logger.debug("opening websocket connection to %s", self.url)
        try:
            self.connection = connect(
                self.url,
                open_timeout=self.open_timeout,
                close_timeout=self.close_timeout,
            )
        except (OSError, websockets.exceptions.WebSocketException) as exc:
            raise TransportConnectionError(
                f"failed to create websocket connection: {exc}"
            ) from exc

    def close(self) -> None:
        connection = self.connection
        if connection is None or self.closed:
            return

        self.closed = True

        # Sends a normal closure frame, then waits up to close_timeout for
        # the server to acknowledge before dropping the TCP connection.
        connection.close()

    def send(self, frame: str) -> None:
        connection = self._require()
        try:
            connection.send(frame)
        except websockets.exceptions.ConnectionClosedOK as exc:
            raise TransportClosed(str(exc)) from exc
        except websockets.exceptions.ConnectionClosed as exc:
            raise TransportError(str(exc)) from exc

    def recv(self) -> str:
        connection = self._require()
        try:
            frame = connection.recv()
        except websockets.exceptions.ConnectionClosedOK as exc:
            # Normal closure, going away, or no status received.
            raise TransportClosed(str(exc)) from exc
        except websockets.exceptions.ConnectionClosed as exc:
            raise TransportError(str(exc)) from exc

        if isinstance(frame, str):
            return frame
        raise InvalidMessageType()

    def _require(self) -> ClientConnection:
        if self.closed:
            raise TransportClosed("websocket connection is closed")
        if self.connection is None:
            raise TransportError("websocket connection is not open")
        return self.connection
