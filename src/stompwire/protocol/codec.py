""" Header escaping for the STOMP wire format. Header names and values are
    escaped on the way out and unescaped on the way in, except for the
    CONNECT and CONNECTED frames, whose headers are exchanged verbatim for
    compatibility with STOMP 1.0 peers.
"""

from .fields import UNESCAPED


_escapes = (
    ('\\', '\\\\'),
    ('\r', '\\r'),
    ('\n', '\\n'),
    (':', '\\c'),
)

_unescapes = dict()
for raw, escaped in _escapes:
    _unescapes[escaped[1]] = raw


def encode_header_value(raw, action=None):
    """ Return the on-the-wire form of the header value *raw*. If *action*
        is CONNECT or CONNECTED the value is returned unmodified.
    """

    if action in UNESCAPED:
        return raw

    # Backslash must go first, otherwise the escapes introduced for the
    # other characters would themselves be escaped.

    for character, escaped in _escapes:
        raw = raw.replace(character, escaped)

    return raw


def decode_header_value(wire, action=None):
    """ Reverse :func:`encode_header_value`. Unrecognized escape sequences,
        including a trailing lone backslash, are left in place rather than
        treated as errors.
    """

    if action in UNESCAPED or '\\' not in wire:
        return wire

    decoded = list()
    index = 0
    length = len(wire)

    while index < length:
        character = wire[index]

        if character == '\\' and index + 1 < length:
            try:
                raw = _unescapes[wire[index + 1]]
            except KeyError:
                decoded.append(wire[index:index + 2])
            else:
                decoded.append(raw)
            index += 2
            continue

        decoded.append(character)
        index += 1

    return ''.join(decoded)


encode_header_name = encode_header_value
decode_header_name = decode_header_value


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
