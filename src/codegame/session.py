""" Local persistence of player credentials, so that a client can reconnect
    to a game it joined earlier.
"""

import logging
import os
import urllib.parse

from . import json


logger = logging.getLogger(__name__)


class SessionNotFound(LookupError):
    """ No stored session exists for the requested game url and username.
    """


class Session:
    """ The credentials of a single player in a single game. Only the
        *game_id*, *player_id* and *player_secret* are written to disk; the
        *game_url* and *username* are the key the session is stored under.
        A spectator session has an empty *player_id*.
    """

    stored = ('game_id', 'player_id', 'player_secret')

    def __init__(self, game_url, username, game_id, player_id='', player_secret=''):

        self.game_url = game_url
        self.username = username
        self.game_id = game_id
        self.player_id = player_id
        self.player_secret = player_secret


    def __eq__(self, other):
        if isinstance(other, Session):
            return vars(self) == vars(other)
        return NotImplemented


    def __repr__(self):
        return 'Session(%r, %r, game_id=%r, player_id=%r)' % (self.game_url, self.username, self.game_id, self.player_id)


    @property
    def spectating(self):
        return self.player_id == '' or self.player_id is None


    def to_dict(self):
        return dict((key, getattr(self, key)) for key in self.stored)


# end of class Session



class SessionStore:
    """ Sessions are stored one file per player, grouped in a directory per
        game url: ``<root>/<escaped game url>/<username>.json``. The *root*
        defaults to the ``games`` subdirectory of :func:`directory`.
    """

    def __init__(self, root=None):

        if root is None:
            root = os.path.join(directory(), 'games')

        self.root = str(root)


    def _game_directory(self, game_url):
        escaped = urllib.parse.quote(game_url, safe='')
        return os.path.join(self.root, escaped)


    def _filename(self, game_url, username):
        return os.path.join(self._game_directory(game_url), username + '.json')


    def load(self, game_url, username):
        """ Return the :class:`Session` stored for this *game_url* and
            *username*. Raises :class:`SessionNotFound` if there is none.
        """

        filename = self._filename(game_url, username)

        try:
            reader = open(filename, 'rb')
        except FileNotFoundError:
            raise SessionNotFound('no session for %s at %s' % (username, game_url))

        with reader:
            raw = reader.read()

        stored = json.loads(raw)

        if isinstance(stored, dict):
            pass
        else:
            raise ValueError('malformed session file: ' + filename)

        arguments = dict()
        for key in Session.stored:
            arguments[key] = stored.get(key, '')

        return Session(game_url, username, **arguments)


    def save(self, session):
        """ Write the *session* to disk, replacing any existing session for
            the same game url and username.
        """

        if session.game_url == '' or session.game_url is None:
            raise ValueError('empty game url')

        game_directory = self._game_directory(session.game_url)

        if os.path.exists(game_directory):
            pass
        else:
            os.makedirs(game_directory, mode=0o755)

        raw_json = json.dumps(session.to_dict())
        target_filename = self._filename(session.game_url, session.username)

        with open(target_filename, 'wb') as writer:
            writer.write(raw_json)

        os.chmod(target_filename, 0o644)
        logger.debug('saved session for %s at %s', session.username, session.game_url)


    def remove(self, session):
        """ Remove the stored copy of *session*, and its game directory if
            that leaves the directory empty. Takes no action and raises no
            errors if nothing is stored.
        """

        if session.game_url == '' or session.game_url is None:
            return

        game_directory = self._game_directory(session.game_url)
        target_filename = self._filename(session.game_url, session.username)

        try:
            os.remove(target_filename)
        except FileNotFoundError:
            pass

        try:
            remaining = os.listdir(game_directory)
        except FileNotFoundError:
            return

        if len(remaining) == 0:
            try:
                os.rmdir(game_directory)
            except OSError:
                # Someone else wrote a session in the meantime.
                pass


# end of class SessionStore



def directory(default=None):
    """ Return the directory location where session data is loaded from
        and saved to. This defaults to ``$XDG_DATA_HOME/codegame``, falling
        back to ``$HOME/.local/share/codegame``, but can be overridden by
        calling this method with a valid path, or by setting the
        ``CODEGAME_HOME`` environment variable. Note that changes to the
        environment variable will be ignored unless it is set prior to the
        first invocation of this method.
    """

    if default is not None:
        default = str(default)
        default = os.path.expandvars(default)

        if os.path.isabs(default):
            pass
        else:
            raise ValueError('the default directory must be an absolute path')

        os.environ['CODEGAME_HOME'] = default
        directory.found = default


    found = directory.found

    if found is not None:
        return found

    try:
        found = os.environ['CODEGAME_HOME']
    except KeyError:
        pass
    else:
        directory.found = found
        return found

    try:
        data_home = os.environ['XDG_DATA_HOME']
    except KeyError:
        try:
            home = os.environ['HOME']
        except KeyError:
            raise RuntimeError('CODEGAME_HOME, XDG_DATA_HOME and HOME environment variables not set, cannot determine session directory')
        data_home = os.path.join(home, '.local', 'share')

    found = os.path.join(data_home, 'codegame')

    directory.found = found
    return found

directory.found = None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
