import queue

import pytest

import codegame
from codegame import json
from codegame.transport.base import Transport


class FakeTransport(Transport):
    """ In-memory stand-in for the websocket. Tests feed inbound frames with
        :func:`feed`, and inspect outbound events in :attr:`sent`.
    """

    def __init__(self):
        self.incoming = queue.Queue()
        self.sent = list()
        self.opened = False
        self.closed = False


    @property
    def is_open(self):
        return self.opened and not self.closed


    def open(self):
        self.opened = True


    def close(self):
        self.closed = True
        self.incoming.put(codegame.TransportClosed('normal closure'))


    def send(self, frame):
        if self.closed:
            raise codegame.TransportClosed('already closed')
        self.sent.append(json.loads(frame))


    def recv(self):
        try:
            item = self.incoming.get(timeout=5)
        except queue.Empty:
            raise codegame.TransportError('fake transport: nothing to receive')

        if isinstance(item, Exception):
            raise item
        if isinstance(item, bytes):
            raise codegame.InvalidMessageType()
        return item


    def feed(self, name, data=None, origin='server'):
        wrapper = {'origin': origin, 'event': {'name': name, 'data': data}}
        self.incoming.put(json.dumps_text(wrapper))


    def feed_raw(self, frame):
        self.incoming.put(frame)


    def fail(self, error):
        self.incoming.put(error)


    def finish(self):
        """ Simulate the server closing the connection cleanly.
        """

        self.incoming.put(codegame.TransportClosed('remote closed'))


    def sent_names(self):
        return [event['name'] for event in self.sent]



class FakeApi:
    """ Stand-in for :class:`codegame.Api` that never touches the network.
    """

    def __init__(self, name='tictactoe', cg_version=codegame.CG_VERSION):
        self.url = 'games.example.com'
        self.tls = False
        self.info = {'name': name, 'cg_version': cg_version}
        self.usernames = dict()
        self.players = dict()
        self.configs = dict()
        self.calls = list()


    def fetch_info(self):
        self.calls.append(('fetch_info',))
        return self.info


    def websocket_url(self, path, *args):
        return codegame.api.base_url('ws', self.tls, self.url + path, *args)


    def create_game(self, public, protected=False, config=None):
        self.calls.append(('create_game', public, protected, config))
        return 'g1', 'join-secret'


    def create_player(self, game_id, username, join_secret=None):
        self.calls.append(('create_player', game_id, username, join_secret))
        return 'p9', 's9'


    def fetch_username(self, game_id, player_id):
        self.calls.append(('fetch_username', game_id, player_id))
        try:
            return self.usernames[player_id]
        except KeyError:
            raise codegame.ApiError('no such player: ' + player_id)


    def fetch_players(self, game_id):
        self.calls.append(('fetch_players', game_id))
        return dict(self.players)


    def fetch_game_config(self, game_id):
        self.calls.append(('fetch_game_config', game_id))
        return self.configs.get(game_id)



@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def store(tmp_path):
    return codegame.SessionStore(tmp_path / 'games')


@pytest.fixture
def socket(api, store, transport):
    instance = codegame.Socket('http://games.example.com/', api=api, store=store, transport=transport)
    yield instance
    instance.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
