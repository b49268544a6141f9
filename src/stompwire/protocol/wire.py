"""Whole-frame serialization.

Layout of one frame on the wire:

    ACTION\\n
    name:value\\n
    ...
    \\n
    [body]\\0

Blank lines before the action line are heart-beats. The body runs for
``content-length`` bytes when that header is present, otherwise up to the
first NUL byte.
"""

from __future__ import annotations

from typing import Optional, Tuple

from . import fields
from .codec import (
    decode_header_name,
    decode_header_value,
    encode_header_name,
    encode_header_value,
)
from .frame import Frame, create


EOL = b"\n"
NUL = b"\x00"

# Characters that can precede an action line without being part of it:
# carriage returns from CRLF peers, and the NUL terminator of a previous
# frame whose body was delimited by content-length.
_NOISE = "\x00\r\n \t"


def pack_frame(frame: Frame) -> bytes:
    """
    Serialize Frame -> bytes

    A content-length header is added when the frame has a body and none
    was set explicitly; the frame itself is not modified.
    """

    action = frame.action
    lines = [action.encode("utf-8")]

    body = frame.body or b""

    for name, value in frame.headers.items():
        lines.append(pack_header(name, value, action))

    if body and fields.CONTENT_LENGTH not in frame.headers:
        lines.append(pack_header(fields.CONTENT_LENGTH, str(len(body)), action))

    lines.append(b"")
    lines.append(b"")

    return EOL.join(lines) + body + NUL


def pack_header(name: str, value: str, action: Optional[str] = None) -> bytes:
    name = encode_header_name(name, action)
    value = encode_header_value(value, action)
    return (name + ":" + value).encode("utf-8")


def parse_action(line: str) -> Optional[str]:
    """Return the action named by *line*, or None for a heart-beat."""

    action = line.strip(_NOISE)
    if action == "":
        return None
    return action


def parse_header(line: str, action: Optional[str] = None) -> Optional[Tuple[str, str]]:
    """Split a header line on its first colon and decode both halves.

    Lines without a colon are not headers; None is returned for them.
    """

    name, colon, value = line.partition(":")
    if colon == "":
        return None

    name = decode_header_name(name, action)
    value = decode_header_value(value, action)
    return name, value


def decode_line(raw: bytes) -> str:
    line = raw.decode("utf-8", errors="replace")
    if line.endswith("\r"):
        line = line[:-1]
    return line


def unpack_frame(data: bytes) -> Optional[Frame]:
    """
    Deserialize bytes -> Frame

    Returns None if *data* holds nothing but heart-beats. Anything after
    the first frame is ignored; use :class:`stompwire.transport.stream.FrameReader`
    to consume a stream of frames.
    """

    data = bytes(data)
    position = 0
    frame = None

    while position < len(data):
        end = data.find(EOL, position)
        if end < 0:
            end = len(data)

        action = parse_action(decode_line(data[position:end]))
        position = end + 1

        if action is not None:
            frame = create(action)
            break

    if frame is None:
        return None

    while position < len(data):
        end = data.find(EOL, position)
        if end < 0:
            end = len(data)

        line = decode_line(data[position:end])
        position = end + 1

        if line == "":
            break

        header = parse_header(line, frame.action)
        if header is not None:
            name, value = header
            frame.headers[name] = value

    remainder = data[position:]
    length = frame.content_length

    if length is not None:
        body = remainder[:length]
    else:
        body = remainder.split(NUL, 1)[0]

    if body:
        frame.body = body

    return frame
