"""Transport layer: frames over an already-open byte stream."""

from .base import (
    TransportError,
    TransportTimeout,
    TransportConnectionError,
    ErrorFrameReceived,
)

from . import stream
from . import interceptor
from . import session

from .stream import FrameReader, FrameWriter
from .interceptor import Interceptor, InterceptorBuilder, Interceptors, Matcher
from .session import Connection, PendingSend
