"""Reserved event names, origins, and debug severities of the CodeGame
protocol.
"""

# Origins for events that did not come from another participant.

ORIGIN_SERVER = "server"
ORIGIN_SELF = "self"

# Handshake events sent by the client.

JOIN = "cg_join"
CONNECT = "cg_connect"
SPECTATE = "cg_spectate"
LEAVE = "cg_leave"

# Handshake responses and lifecycle events sent by the server.

JOINED = "cg_joined"
CONNECTED = "cg_connected"
NEW_PLAYER = "cg_new_player"
LEFT = "cg_left"
INFO = "cg_info"
ERROR = "cg_error"

STANDARD = frozenset((
    JOIN, CONNECT, SPECTATE, LEAVE,
    JOINED, CONNECTED, NEW_PLAYER, LEFT, INFO, ERROR,
))

# Debug message severities.

DEBUG_ERROR = "error"
DEBUG_WARNING = "warning"
DEBUG_INFO = "info"
DEBUG_TRACE = "trace"


def is_standard(name):
    """Return True if *name* is reserved by the CodeGame protocol."""
    return name in STANDARD
