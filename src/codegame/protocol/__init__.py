from . import fields
from . import message


"""
CodeGame Protocol Layer
=======================

This package defines the event model exchanged with a CodeGame server.
It knows nothing about websockets or HTTP.

Layer Architecture Overview
---------------------------

User Code
    │
    ▼
Socket (codegame.socket)
    Setup operations, dispatch entry points, send()
    │
    ▼
Event Model (message.py)
    - Event
    - EventWrapper
    - decode() / Event.encode()
    │
    ▼
Field Vocabulary (fields.py)
    Reserved event names and origin sentinels

Below the Protocol Layer (for context)
--------------------------------------

Transport Layer (codegame.transport)
    Moves text frames; the websocket implementation lives there.
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
