""" The :class:`Socket` is the principal entry point for a CodeGame client.
    It owns the websocket connection to the game server, runs a background
    thread receiving events from it, and dispatches those events to the
    callbacks registered by the application.
"""

import enum
import logging
import queue
import threading

from . import version
from .api import Api, trim_url
from .cache import UsernameCache
from .correlator import Correlator
from .protocol import fields
from .protocol.message import DecodeError, Event, decode, error_event
from .registry import CallbackRegistry
from .session import Session, SessionStore
from .transport import (
    SocketClosed,
    TransportClosed,
    TransportError,
    WebSocketTransport,
)


logger = logging.getLogger(__name__)


class PreconditionError(AssertionError):
    """ An operation was attempted in a state that does not permit it, such
        as sending an event before joining a game, or sending an event while
        spectating. These indicate a programming error in the caller.
    """


class State(enum.Enum):
    IDLE = 'idle'
    CONNECTING = 'connecting'
    OPEN = 'open'
    CLOSING = 'closing'
    CLOSED = 'closed'


# Marks the end of the event queue. Consumers put it back after taking it
# so that every consumer observes the end of the stream.

_end = object()



class Socket:
    """ A :class:`Socket` represents one connection to the CodeGame server
        at *url*. The scheme may be omitted from the url; whether to use TLS
        is determined by probing the server.

        Construction fetches the server info and checks protocol version
        compatibility, but does not open the websocket; that happens in the
        first setup operation (:func:`join`, :func:`connect`,
        :func:`register`, :func:`spectate` or :func:`restore_session`). A
        successful setup operation starts the background receive thread.
        Events are then dispatched to callbacks by calling either
        :func:`run` or, periodically, :func:`next_event`.

        A socket is not reusable: once closed, construct a new one.

        The *api*, *store*, and *transport* arguments replace the REST
        client, the session store, and the websocket transport respectively;
        the defaults are appropriate for normal use.

        :ivar callbacks: The :class:`codegame.registry.CallbackRegistry`.
        :ivar usernames: The :class:`codegame.cache.UsernameCache`.
        :ivar session: The current :class:`codegame.session.Session`, or None.
        :ivar state: The current :class:`State`.
        :ivar error: The reason the socket closed, once it is closed.
    """

    close_timeout = 5

    def __init__(self, url, api=None, store=None, transport=None):

        self.url = trim_url(url)

        if api is None:
            api = Api(self.url)

        if store is None:
            store = SessionStore()

        self.api = api
        self.sessions = store

        self.info = api.fetch_info()
        self.name = self.info['name']

        server_version = self.info['cg_version']
        if version.is_compatible(server_version):
            pass
        else:
            logger.warning('CodeGame version mismatch. Server: v%s, client: v%s', server_version, version.CG_VERSION)

        self.callbacks = CallbackRegistry()
        self.usernames = UsernameCache()
        self.session = None
        self.state = State.IDLE
        self.error = None

        self._transport = transport
        self._queue = queue.SimpleQueue()
        self._state_lock = threading.Lock()
        self._thread = None
        self._pending = False

        self.on(fields.NEW_PLAYER, self._on_new_player)
        self.on(fields.LEFT, self._on_left)
        self.on(fields.INFO, self._on_info)


    def __repr__(self):
        return 'Socket(%r, state=%s)' % (self.url, self.state.value)


    # Callback management.

    def on(self, name, callback):
        """ Register a *callback* that is invoked as ``callback(origin, event)``
            every time an event with this *name* is dispatched. Returns a
            handle suitable for :func:`remove_callback`.
        """

        return self.callbacks.register(name, callback)


    def once(self, name, callback):
        """ Register a *callback* that is invoked only for the first
            dispatched event with this *name*.
        """

        return self.callbacks.register_once(name, callback)


    def remove_callback(self, handle):
        self.callbacks.remove(handle)


    def _on_new_player(self, origin, event):
        username = event.get('username')
        if username is not None:
            self.usernames.set(origin, username)


    def _on_left(self, origin, event):
        self.usernames.remove(origin)


    def _on_info(self, origin, event):
        players = event.get('players')
        if isinstance(players, dict):
            self.usernames.update(players)


    # Setup operations.

    def create(self, public=False, protected=False, config=None):
        """ Create a new game on the server. Returns a (game_id, join_secret)
            tuple; the join secret is empty unless the game is *protected*.
        """

        return self.api.create_game(public, protected, config)


    def join(self, game_id, username, join_secret=None):
        """ Join the game *game_id* as a new player named *username*.
            Returns the new :class:`Session`, which is also saved to the
            session store.
        """

        self._require_no_session()

        if username is None or username == '':
            raise ValueError('empty username')

        data = {'game_id': game_id, 'username': username}
        if join_secret:
            data['join_secret'] = join_secret

        results = self._request(fields.JOIN, data, (fields.JOINED,))
        joined = results[fields.JOINED]

        player_id = joined.event.get('player_id')
        if not player_id:
            player_id = joined.origin

        secret = joined.event.get('secret', '')

        self.usernames.set(player_id, username)

        session = Session(self.url, username, game_id, player_id, secret)
        return self._established(session)


    def connect(self, game_id, player_id, player_secret):
        """ Connect to the game *game_id* as the existing player *player_id*.
            Returns the resulting :class:`Session`.
        """

        self._require_no_session()

        data = {'game_id': game_id, 'player_id': player_id, 'secret': player_secret}
        results = self._request(fields.CONNECT, data, (fields.CONNECTED,))
        connected = results[fields.CONNECTED]

        username = connected.event.get('username', '')
        if username:
            self.usernames.set(player_id, username)

        session = Session(self.url, username, game_id, player_id, player_secret)
        return self._established(session)


    def register(self, game_id, username, join_secret=None):
        """ Create a new player through the REST interface, then connect
            to the game as that player.
        """

        self._require_no_session()

        player_id, player_secret = self.api.create_player(game_id, username, join_secret)
        return self.connect(game_id, player_id, player_secret)


    def spectate(self, game_id):
        """ Join the game *game_id* as a spectator. Spectators receive events
            but cannot send any. The returned session is not saved.
        """

        self._require_no_session()

        self._request(fields.SPECTATE, {'game_id': game_id}, (fields.INFO,))

        session = Session(self.url, '', game_id)
        return self._established(session, save=False)


    def restore_session(self, username):
        """ Reconnect using the session previously saved for *username* on
            this server. Raises :class:`codegame.session.SessionNotFound` if
            there is no such session. If the saved session cannot be read,
            or reconnecting to the server fails, the saved session is removed
            before the error is raised.
        """

        self._require_no_session()
        self._require_setup_state()

        try:
            session = self.sessions.load(self.url, username)
        except ValueError:
            logger.warning('removing unreadable session for %s at %s', username, self.url)
            self.sessions.remove(Session(self.url, username, ''))
            raise

        try:
            return self.connect(session.game_id, session.player_id, session.player_secret)
        except PreconditionError:
            raise
        except Exception:
            self.sessions.remove(session)
            raise


    def _require_no_session(self):
        if self.session is not None:
            raise PreconditionError('already joined a game')


    def _require_setup_state(self):
        state = self.state
        if state in (State.IDLE, State.CONNECTING):
            return
        raise PreconditionError('cannot start a setup operation on a socket that is ' + state.value)


    def _established(self, session, save=True):
        """ The handshake for *session* completed; record it and start the
            receive thread.
        """

        self.session = session

        if save and session.username:
            try:
                self.sessions.save(session)
            except (OSError, ValueError) as e:
                logger.error('failed to save session: %s', e)

        self._start()
        return session


    # Request/response handling, used only by the setup operations.

    def _request(self, name, data, expected):
        """ Send an event with *name* and *data*, then block until every
            event name in *expected* has been received. Every event received
            along the way is dispatched to registered callbacks before it is
            checked. Returns a dictionary of the expected events, keyed by
            name.

            Raises :class:`codegame.correlator.ServerError` if the server
            responds with an error event, or the underlying
            :class:`codegame.transport.TransportError` if the connection
            fails, in which case the socket is closed.
        """

        with self._state_lock:
            self._require_setup_state()

            if self._pending:
                raise PreconditionError('another setup operation is already in progress')

            self._pending = True
            self.state = State.CONNECTING

        try:
            self._open()
            self._transmit(Event(name, data))

            correlator = Correlator(expected)

            while not correlator.done:
                wrapper = self._receive()
                self._dispatch(wrapper)
                correlator.feed(wrapper)

            return correlator.results

        except TransportError as e:
            self._terminate(e)
            raise

        finally:
            with self._state_lock:
                self._pending = False


    def _open(self):

        if self._transport is None:
            self._transport = WebSocketTransport(self.api.websocket_url('/api/ws'))

        if self._transport.is_open:
            return

        self._transport.open()
        logger.debug('connected to %s', self.url)


    def _transmit(self, event):
        self._transport.send(event.encode())


    def _receive(self):
        """ Read and decode the next frame from the transport. A frame that
            cannot be decoded is replaced by a locally originated error
            event describing the failure. Transport errors propagate.
        """

        try:
            frame = self._transport.recv()
            return decode(frame)
        except DecodeError as e:
            logger.debug('skipping frame from %s: %s', self.url, e)
            return error_event(str(e))


    def _dispatch(self, wrapper):
        self.callbacks.dispatch(wrapper.origin, wrapper.event)


    # Background receive thread.

    def _start(self):

        with self._state_lock:
            if self.state != State.CONNECTING:
                return

            self.state = State.OPEN
            self._thread = threading.Thread(target=self._listen, name='codegame.Socket:' + self.url)
            self._thread.daemon = True
            self._thread.start()


    def _listen(self):

        while True:
            try:
                wrapper = self._receive()
            except TransportError as e:
                self._terminate(e)
                break
            except Exception as e:
                logger.exception('receive thread for %s failed', self.url)
                self._terminate(TransportError(str(e)))
                break

            self._queue.put(wrapper)


    def _terminate(self, error):
        """ Record the terminal *error*, move to the closed state, and mark
            the end of the event queue. Only the first call has any effect.
        """

        if isinstance(error, TransportClosed) and not isinstance(error, SocketClosed):
            closed = SocketClosed(str(error) or 'connection closed')
            closed.__cause__ = error
            error = closed

        with self._state_lock:
            if self.state == State.CLOSED:
                return

            self.state = State.CLOSED
            self.error = error

        if isinstance(error, SocketClosed):
            logger.info('connection to %s closed', self.url)
        else:
            logger.warning('connection to %s failed: %s', self.url, error)

        self._queue.put(_end)


    # Dispatch entry points.

    def run(self):
        """ Dispatch events as they arrive, blocking until the connection is
            closed. Returns None if it closed cleanly; otherwise the
            :class:`codegame.transport.TransportError` that ended the
            connection is raised.
        """

        if self.state in (State.IDLE, State.CONNECTING):
            raise PreconditionError('not connected to a game')

        while True:
            wrapper = self._queue.get()

            if wrapper is _end:
                self._queue.put(_end)
                break

            self._dispatch(wrapper)

        if isinstance(self.error, SocketClosed):
            return None

        raise self.error


    def next_event(self):
        """ Dispatch the next queued event, if any, and return it as an
            :class:`codegame.protocol.message.EventWrapper`. Returns None
            immediately if no event is queued. Once the connection has
            closed every call raises the terminal error, which is a
            :class:`codegame.transport.SocketClosed` for a clean close.
        """

        try:
            wrapper = self._queue.get(block=False)
        except queue.Empty:
            return None

        if wrapper is _end:
            self._queue.put(_end)
            raise self.error

        self._dispatch(wrapper)
        return wrapper


    # Steady state operations.

    def send(self, name, data=None):
        """ Send an event with this *name* and *data* to the server. Sending
            is only possible as a player, after a setup operation succeeded.
            Concurrent calls to :func:`send` must be serialized by the caller.
        """

        if self.state != State.OPEN:
            raise PreconditionError('cannot send events on a socket that is ' + self.state.value)

        if self.session is None or self.session.spectating:
            raise PreconditionError('spectators cannot send events')

        self._transmit(Event(name, data))


    def leave(self):
        """ Leave the current game. All callbacks for non-standard events
            are removed, the username cache is cleared, the saved session is
            deleted, and the server is notified. The connection itself stays
            open; call :func:`close` to close it. Leaving when not in a game
            only clears local state.
        """

        with self._state_lock:
            if self._pending:
                raise PreconditionError('cannot leave while a setup operation is in progress')

            session = self.session
            self.session = None

        self.callbacks.clear(keep=fields.STANDARD)
        self.usernames.clear()

        if session is None:
            return

        if session.spectating:
            pass
        else:
            try:
                self.sessions.remove(session)
            except OSError as e:
                logger.error('failed to remove session: %s', e)

        if self.state == State.OPEN:
            try:
                self._transmit(Event(fields.LEAVE))
            except TransportError as e:
                logger.debug('failed to notify %s of leaving: %s', self.url, e)


    def close(self):
        """ Close the connection. The websocket close handshake is given a
            few seconds to complete before the connection is dropped. Calling
            :func:`close` more than once has no further effect.
        """

        with self._state_lock:
            if self.state in (State.CLOSING, State.CLOSED):
                return

            self.state = State.CLOSING
            thread = self._thread

        transport = self._transport
        if transport is not None and transport.is_open:
            try:
                transport.close()
            except TransportError as e:
                logger.debug('error while closing %s: %s', self.url, e)

        if thread is None:
            self._terminate(SocketClosed('connection closed'))
        elif thread is not threading.current_thread():
            thread.join(self.close_timeout)


    # Identity helpers.

    def username(self, player_id):
        """ Return the username of *player_id*. Usernames are cached; on a
            cache miss the server is asked, and the empty string is returned
            if that fails.
        """

        cached = self.usernames.get(player_id)
        if cached is not None:
            return cached

        session = self.session
        if session is None:
            return ''

        try:
            username = self.api.fetch_username(session.game_id, player_id)
        except Exception as e:
            logger.warning('failed to fetch username of %s: %s', player_id, e)
            return ''

        self.usernames.set(player_id, username)
        return username


    def refresh_usernames(self):
        """ Replace the username cache with the player list of the current
            game, as reported by the server. Returns the new mapping.
        """

        if self.session is None:
            raise PreconditionError('not in a game')

        players = self.api.fetch_players(self.session.game_id)
        self.usernames.replace(players)
        return players


    def game_config(self, game_id=None):
        """ Fetch the configuration of *game_id*, or of the current game if
            no id is given.
        """

        if game_id is None:
            if self.session is None:
                raise PreconditionError('not in a game')
            game_id = self.session.game_id

        return self.api.fetch_game_config(game_id)


# end of class Socket


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
