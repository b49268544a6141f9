"""Convenience constructors for client frames."""

from __future__ import annotations

import itertools
import threading
from typing import Any, Iterable, Optional

from .. import config
from . import fields
from .frame import Frame


def connect(host: str, login: Optional[str] = None, passcode: Optional[str] = None,
            versions: Optional[Iterable[str]] = None, heart_beat: Optional[str] = None) -> Frame:

    if versions is None:
        versions = config.versions

    frame = Frame(fields.CONNECT)
    frame.set_header(fields.ACCEPT_VERSION, ','.join(versions))
    frame.set_header(fields.HOST, host)

    if login is not None:
        frame.set_header(fields.LOGIN, login)
    if passcode is not None:
        frame.set_header(fields.PASSCODE, passcode)
    if heart_beat is not None:
        frame.set_header(fields.HEART_BEAT, heart_beat)

    return frame


def send(destination: str, body: Any = None, content_type: Optional[str] = None, **headers) -> Frame:
    frame = Frame(fields.SEND, _headers(headers), body)
    frame.destination = destination
    frame.content_type = content_type
    return frame


def subscribe(destination: str, id: Optional[str] = None, ack: str = fields.ACK_AUTO, **headers) -> Frame:
    if id is None:
        id = next_id()

    frame = Frame(fields.SUBSCRIBE, _headers(headers))
    frame.destination = destination
    frame.id = id
    frame.ack = ack
    return frame


def unsubscribe(id: str, **headers) -> Frame:
    frame = Frame(fields.UNSUBSCRIBE, _headers(headers))
    frame.id = id
    return frame


def ack(message: Frame, **headers) -> Frame:
    """Acknowledge a MESSAGE frame."""
    return _acknowledge(fields.ACK, message, headers)


def nack(message: Frame, **headers) -> Frame:
    """Reject a MESSAGE frame."""
    return _acknowledge(fields.NACK, message, headers)


def disconnect(**headers) -> Frame:
    return Frame(fields.DISCONNECT, _headers(headers))


def _acknowledge(action: str, message: Frame, headers: dict) -> Frame:

    # STOMP 1.2 brokers hand out an 'ack' header on MESSAGE frames for
    # exactly this purpose; 1.0 and 1.1 brokers expect the message-id.

    frame = Frame(action, _headers(headers))
    frame.id = message.get_header(fields.ACK_MODE) or message.message_id
    frame.set_header(fields.MESSAGE_ID, message.message_id)
    frame.subscription = message.subscription
    frame.destination = message.destination
    return frame


def _headers(keywords: dict) -> dict:
    # Python keywords can't carry dashes; content_length -> content-length.
    headers = dict()
    for name, value in keywords.items():
        if value is None:
            continue
        headers[name.replace('_', '-')] = value
    return headers


_id_min = 0
_id_max = 0xFFFFFFFF
_id_lock = threading.Lock()
_id_ticker = itertools.count(_id_min)


def next_id() -> str:
    """ Return the next locally unique identification number, used for
        subscription ids and receipt requests.
    """

    global _id_ticker
    _id_lock.acquire()
    id = next(_id_ticker)

    if id >= _id_max:
        _id_ticker = itertools.count(_id_min)

        if id > _id_max:
            id = next(_id_ticker)

    _id_lock.release()

    return '%08x' % (id)
