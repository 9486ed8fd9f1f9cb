""" Python client for CodeGame servers. This includes the socket runtime,
    which joins a game and dispatches its events to registered callbacks,
    along with the REST calls and session persistence it relies on.
"""

# Utility components.

from . import json
from . import version

# Submodules used by multiple other components.

from . import protocol
from . import transport
from . import session
from . import api

# Primary public-facing interfaces.

from .api import Api, ApiError
from .correlator import ServerError
from .protocol.fields import ORIGIN_SELF, ORIGIN_SERVER
from .protocol.message import DecodeError, Event, EventWrapper, InvalidMessageType
from .session import Session, SessionNotFound, SessionStore
from .socket import PreconditionError, Socket, State
from .transport import (
    SocketClosed,
    TransportClosed,
    TransportConnectionError,
    TransportError,
)
from .debug import DebugSocket

CG_VERSION = version.CG_VERSION

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
