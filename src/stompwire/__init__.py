""" Python implementation of a STOMP client engine: frames and their wire
    encoding, timed frame reading over a byte stream, broker/destination
    addressing by URL, and interceptor-based correlation of sends with the
    receipts and acknowledgements that answer them.
"""

# Utility components.

from . import config
from . import json
from . import holder

# Submodules used by multiple other components.

from . import protocol
from . import transport

# Primary public-facing interfaces.

from .protocol import Frame, FrameError, FrameKind, StompUrl, StompUrlError
from .transport import (
    Connection,
    ErrorFrameReceived,
    FrameReader,
    FrameWriter,
    InterceptorBuilder,
    PendingSend,
    TransportConnectionError,
    TransportError,
    TransportTimeout,
)
from .transport.interceptor import builder, for_body_as_string
from .holder import Holder
from .client import Client

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
