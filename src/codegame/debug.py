""" Access to the debug message streams of a CodeGame server. A server can
    report diagnostics for itself, for a single game, or for a single
    player; a :class:`DebugSocket` subscribes to one of those streams and
    hands each message to the registered callbacks.
"""

import logging
import urllib.parse

from . import json
from .api import Api, trim_url
from .protocol import fields
from .protocol.message import DecodeError, Event
from .registry import CallbackRegistry
from .socket import PreconditionError
from .transport import TransportClosed, WebSocketTransport


logger = logging.getLogger(__name__)

_message = 'debug_message'


class DebugSocket:
    """ Listen to debug messages from the server at *url*. By default every
        severity except trace is enabled; see :func:`set_severities`.

        Callbacks registered with :func:`on_message` are invoked as
        ``callback(severity, message, data)``, where *data* is the JSON
        text of the optional data attached to the message, or the empty
        string if there was none.
    """

    def __init__(self, url, api=None, transport=None):

        self.url = trim_url(url)

        if api is None:
            api = Api(self.url)

        self.api = api
        self.callbacks = CallbackRegistry()
        self.endpoint = None

        self.enable_trace = False
        self.enable_info = True
        self.enable_warning = True
        self.enable_error = True

        self._transport = transport
        self._connected = False


    def set_severities(self, enable_trace, enable_info, enable_warning, enable_error):
        """ Enable or disable specific message severities. This must be
            called before connecting to one of the debug streams.
        """

        if self._connected:
            raise PreconditionError('cannot change severities after a connection has already been established')

        self.enable_trace = enable_trace
        self.enable_info = enable_info
        self.enable_warning = enable_warning
        self.enable_error = enable_error


    def on_message(self, callback):
        """ Register a *callback* for every debug message. Returns a handle
            suitable for :func:`remove_callback`.
        """

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        def unpack(origin, event):
            callback(event.data['severity'], event.data['message'], event.data['data'])

        return self.callbacks.register(_message, unpack)


    def remove_callback(self, handle):
        self.callbacks.remove(handle)


    def _query(self):

        flags = (
            ('trace', self.enable_trace),
            ('info', self.enable_info),
            ('warning', self.enable_warning),
            ('error', self.enable_error),
        )

        pairs = list()
        for name, enabled in flags:
            if enabled:
                pairs.append((name, 'true'))
            else:
                pairs.append((name, 'false'))

        return pairs


    def debug_server(self):
        """ Listen to the debug messages of the server itself. Blocks until
            the connection closes.
        """

        url = self.api.websocket_url('/api/debug')
        return self._listen_at(url, self._query())


    def debug_game(self, game_id):
        """ Listen to the debug messages of the game *game_id*.
        """

        url = self.api.websocket_url('/api/games/%s/debug', game_id)
        return self._listen_at(url, self._query())


    def debug_player(self, game_id, player_id, player_secret):
        """ Listen to the debug messages of a single player.
        """

        url = self.api.websocket_url('/api/games/%s/players/%s/debug', game_id, player_id)
        query = [('player_secret', player_secret)] + self._query()
        return self._listen_at(url, query)


    def _listen_at(self, url, query):

        if self._connected:
            raise PreconditionError('debug socket is already connected')

        url = url + '?' + urllib.parse.urlencode(query)
        self.endpoint = url

        if self._transport is None:
            self._transport = WebSocketTransport(url)

        self._transport.open()
        self._connected = True

        return self.listen()


    def listen(self):
        """ Dispatch debug messages to the registered callbacks until the
            connection closes. Returns None on a clean close; any other
            transport error is raised. Frames that cannot be decoded are
            logged and skipped.
        """

        while True:
            try:
                frame = self._transport.recv()
            except TransportClosed:
                return None
            except DecodeError as e:
                logger.warning('skipping debug frame: %s', e)
                continue

            try:
                raw = json.loads(frame)
            except json.JSONDecodeError as e:
                logger.warning('failed to decode debug message: %s', e)
                continue

            if isinstance(raw, dict):
                pass
            else:
                logger.warning('skipping malformed debug message: %r', raw)
                continue

            data = raw.get('data')
            if data is None:
                data = ''
            else:
                data = json.dumps_text(data)

            message = dict()
            message['severity'] = raw.get('severity', '')
            message['message'] = raw.get('message', '')
            message['data'] = data

            self.callbacks.dispatch(fields.ORIGIN_SERVER, Event(_message, message))


    def close(self):
        """ Close the underlying websocket connection.
        """

        if self._transport is not None:
            self._transport.close()


# end of class DebugSocket


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
