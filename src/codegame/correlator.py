""" Matching of a handshake request to the server's eventual response(s).
"""

from .protocol import fields


class ServerError(Exception):
    """ The server answered a pending request with an error event. The
        server's reason text is available as *message*.
    """

    def __init__(self, message):
        Exception.__init__(self, message)
        self.message = message


class Correlator:
    """ The :class:`Correlator` tracks which response names are still
        outstanding for a single request. Every inbound event observed while
        the request is pending is handed to :func:`feed`; expected names may
        arrive in any order, interleaved with unrelated traffic.

        :ivar remaining: The set of response names not yet observed.
        :ivar results: Observed responses, keyed by event name. Only the
                       first event for each expected name is retained.
    """

    def __init__(self, expected):

        if isinstance(expected, str):
            expected = (expected,)

        self.remaining = set(expected)
        self.results = dict()

        if len(self.remaining) == 0:
            raise ValueError('at least one response name must be expected')


    @property
    def done(self):
        return len(self.remaining) == 0


    def feed(self, wrapper):
        """ Consider a newly received *wrapper*. Returns True once every
            expected name has been observed. A server-originated error event
            raises :class:`ServerError`; locally synthesized error events
            (decode failures) are ignored here.
        """

        name = wrapper.event.name

        if name in self.remaining:
            self.remaining.remove(name)
            self.results[name] = wrapper

        elif name == fields.ERROR and wrapper.origin != fields.ORIGIN_SELF:
            message = wrapper.event.get('message')
            if message is None:
                message = 'unknown server error'
            raise ServerError(str(message))

        return self.done


# end of class Correlator


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
