import threading


class UsernameCache:
    """ Thread-safe mapping of participant id to display name. Entries are
        added when players join or a roster arrives, removed when a player
        leaves, and the whole cache is cleared when leaving a game.
    """

    def __init__(self):
        self._names = dict()
        self._lock = threading.Lock()


    def __contains__(self, player_id):
        with self._lock:
            return player_id in self._names


    def __len__(self):
        with self._lock:
            return len(self._names)


    def get(self, player_id, default=None):
        with self._lock:
            return self._names.get(player_id, default)


    def set(self, player_id, username):
        with self._lock:
            self._names[player_id] = username


    def update(self, players):
        """ Add every player_id/username pair in the *players* mapping.
        """

        with self._lock:
            self._names.update(players)


    def replace(self, players):
        with self._lock:
            self._names = dict(players)


    def remove(self, player_id):
        with self._lock:
            self._names.pop(player_id, None)


    def clear(self):
        with self._lock:
            self._names.clear()


    def snapshot(self):
        """ Return a copy of the current contents as a plain dictionary.
        """

        with self._lock:
            return dict(self._names)


# end of class UsernameCache


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
