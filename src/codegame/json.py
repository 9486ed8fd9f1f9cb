''' Wrapper module around orjson providing the equivalent of
    :func:`json.loads` and :func:`json.dumps`. The 'dumps' method always
    returns bytes; callers that need text for a websocket frame decode it.
'''

import orjson

dumps = orjson.dumps
loads = orjson.loads

JSONDecodeError = orjson.JSONDecodeError


def dumps_text(value):
    """ Encode *value* as JSON and return it as a string.
    """

    return dumps(value).decode()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
