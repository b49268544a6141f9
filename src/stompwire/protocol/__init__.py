"""
stompwire protocol layer
========================

Transport-agnostic STOMP vocabulary and data structures:

    fields.py   action and header names
    codec.py    header escaping
    frame.py    the Frame model and the action -> kind table
    factory.py  convenience constructors for client frames
    wire.py     Frame <-> bytes
    url.py      StompUrl broker/destination addressing

The protocol layer MUST NOT depend on the transport layer; dependencies
only flow downward, transport -> protocol.
"""

from . import fields
from . import codec
from . import frame
from . import factory
from . import url
from . import wire

from .frame import Frame, FrameError, FrameKind
from .url import StompUrl, StompUrlError


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
