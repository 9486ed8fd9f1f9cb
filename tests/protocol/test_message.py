import codegame
import pytest

from codegame.protocol import fields
from codegame.protocol.message import decode, error_event


def test_decode():

    frame = '{"origin": "p2", "event": {"name": "move", "data": {"x": 1, "y": 2}}}'
    wrapper = decode(frame)

    assert wrapper.origin == 'p2'
    assert wrapper.name == 'move'
    assert wrapper.event.data == {'x': 1, 'y': 2}
    assert wrapper.event.get('x') == 1
    assert wrapper.event.get('z') is None


def test_decode_bytes():
    wrapper = decode(b'{"origin": "server", "event": {"name": "board"}}')
    assert wrapper.origin == 'server'
    assert wrapper.event.data == {}


def test_decode_failures():

    frames = (
        'not json',
        '[1, 2, 3]',
        '{"origin": "server"}',
        '{"origin": "server", "event": "board"}',
        '{"origin": "server", "event": {"data": {}}}',
        '{"origin": "server", "event": {"name": "", "data": {}}}',
        '{"origin": "server", "event": {"name": 5, "data": {}}}',
    )

    for frame in frames:
        with pytest.raises(codegame.DecodeError):
            decode(frame)


def test_invalid_message_type():
    error = codegame.InvalidMessageType()
    assert isinstance(error, codegame.DecodeError)
    assert str(error) == 'invalid message type'


def test_encode():

    event = codegame.Event('move', {'x': 1})
    encoded = codegame.json.loads(event.encode())
    assert encoded == {'name': 'move', 'data': {'x': 1}}

    # Events without data still carry an (empty) data object.

    encoded = codegame.json.loads(codegame.Event('cg_leave').encode())
    assert encoded == {'name': 'cg_leave', 'data': {}}


def test_unmarshal():

    class Move:
        def __init__(self, x, y):
            self.x = x
            self.y = y

    event = codegame.Event('move', {'x': 3, 'y': 4})
    move = event.unmarshal(Move)
    assert move.x == 3
    assert move.y == 4

    assert event.unmarshal() == {'x': 3, 'y': 4}

    with pytest.raises(TypeError):
        codegame.Event('move', [1, 2]).unmarshal(Move)


def test_error_event():
    wrapper = error_event('failed to decode event: empty event name field')

    assert wrapper.origin == fields.ORIGIN_SELF
    assert wrapper.name == fields.ERROR
    assert wrapper.event.get('message') == 'failed to decode event: empty event name field'


def test_standard_names():
    assert fields.is_standard('cg_error')
    assert fields.is_standard(fields.INFO)
    assert not fields.is_standard('board')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
