""" A class representation of a CodeGame event, and the envelope that
    carries it from the server.
"""

from .. import json
from . import fields


class DecodeError(ValueError):
    """ An inbound frame could not be interpreted as an event. These errors
        are recoverable; the offending frame is skipped.
    """


class InvalidMessageType(DecodeError):
    """ An inbound frame was not a text frame.
    """

    def __init__(self, message='invalid message type'):
        DecodeError.__init__(self, message)



class Event:
    """ The :class:`Event` provides a very thin encapsulation of what it
        means to be an event in a CodeGame context: a *name*, and whatever
        *data* accompanies it. The data is the decoded JSON value as it
        arrived on the wire; nothing in this package looks inside it beyond
        the handful of reserved events in :mod:`codegame.protocol.fields`.

        :ivar name: The event name, never empty for a decoded event.
        :ivar data: The event-specific data, typically a dictionary.
    """

    def __init__(self, name, data=None):

        if data is None:
            data = dict()

        self.name = name
        self.data = data


    def __eq__(self, other):
        if isinstance(other, Event):
            return self.name == other.name and self.data == other.data
        return NotImplemented


    def __repr__(self):
        return 'Event(%r, %r)' % (self.name, self.data)


    def get(self, field, default=None):
        """ Return a single *field* from the event data, or *default* if the
            data is not a dictionary or does not contain that field.
        """

        try:
            return self.data[field]
        except (KeyError, TypeError, IndexError):
            return default


    def unmarshal(self, type=None):
        """ Return the event data. If a *type* is provided, the data is
            expected to be a dictionary, and will be passed as keyword
            arguments to construct an instance of that type.
        """

        if type is None:
            return self.data

        if isinstance(self.data, dict):
            pass
        else:
            raise TypeError('event data is not an object: ' + repr(self.data))

        return type(**self.data)


    def encode(self):
        """ Return the JSON text sent on the wire for this event.
        """

        return json.dumps_text({'name': self.name, 'data': self.data})


# end of class Event



class EventWrapper:
    """ Inbound events arrive wrapped with the identity of the sender. The
        *origin* is either a participant id, or one of the sentinels in
        :mod:`codegame.protocol.fields` (the server, or this client for
        locally synthesized events).
    """

    def __init__(self, origin, event):
        self.origin = origin
        self.event = event


    def __eq__(self, other):
        if isinstance(other, EventWrapper):
            return self.origin == other.origin and self.event == other.event
        return NotImplemented


    def __repr__(self):
        return 'EventWrapper(%r, %r)' % (self.origin, self.event)


    @property
    def name(self):
        return self.event.name


# end of class EventWrapper



def decode(frame):
    """ Interpret a single text *frame* as an :class:`EventWrapper`. Raises
        :class:`DecodeError` if the frame is not valid JSON, is not shaped
        like a wrapped event, or carries an empty event name.
    """

    try:
        raw = json.loads(frame)
    except json.JSONDecodeError as e:
        raise DecodeError('failed to decode event: ' + str(e))

    if isinstance(raw, dict):
        pass
    else:
        raise DecodeError('failed to decode event: expected an object')

    event = raw.get('event')

    if isinstance(event, dict):
        pass
    else:
        raise DecodeError("failed to decode event: missing 'event' object")

    name = event.get('name')

    if isinstance(name, str) and name != '':
        pass
    else:
        raise DecodeError('failed to decode event: empty event name field')

    origin = raw.get('origin')
    if origin is None:
        origin = ''
    else:
        origin = str(origin)

    return EventWrapper(origin, Event(name, event.get('data')))



def error_event(reason):
    """ Build the locally originated error event used to report frames that
        could not be decoded.
    """

    event = Event(fields.ERROR, {'message': reason})
    return EventWrapper(fields.ORIGIN_SELF, event)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
