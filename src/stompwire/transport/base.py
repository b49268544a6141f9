"""Transport error taxonomy.

A timeout while reading is not an error: readers return None and waits
return False. The exceptions here are for callers that asked for a result
and did not get one, or that used a connection which is no longer usable.
Underlying I/O failures are raised as the original :class:`OSError`.
"""

from __future__ import annotations


class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportTimeout(TransportError):
    """A request did not receive a timely response."""


class TransportConnectionError(TransportError):
    """The connection is closed, or the broker refused it."""


class ErrorFrameReceived(TransportError):
    """The broker answered a request with an ERROR frame."""

    def __init__(self, frame):
        self.frame = frame

        message = frame.get_header("message")
        if message is None:
            message = frame.text or "ERROR frame received"

        super().__init__(message)
