""" A class representation of a STOMP frame, plus the table that maps an
    action token to the family of frame it belongs to.
"""

import enum

from . import fields


class FrameError(ValueError):
    """ A frame is missing something its action requires. """


class FrameKind(enum.Enum):
    """ The direction a frame travels in: client frames are sent to the
        broker, server frames arrive from it. Anything else is generic.
    """

    CLIENT = 'client'
    SERVER = 'server'
    GENERIC = 'generic'


class Action:
    """ One row in the action table: which :class:`FrameKind` an action
        belongs to, and which headers a frame of that action must carry.
    """

    def __init__(self, kind, required=()):
        self.kind = kind
        self.required = tuple(required)


# Required headers follow STOMP 1.2. CONNECT is left permissive so that 1.0
# brokers, which know nothing about accept-version or host, still work.

actions = {
    fields.CONNECT:     Action(FrameKind.CLIENT),
    fields.STOMP:       Action(FrameKind.CLIENT),
    fields.SEND:        Action(FrameKind.CLIENT, (fields.DESTINATION,)),
    fields.SUBSCRIBE:   Action(FrameKind.CLIENT, (fields.DESTINATION, fields.ID)),
    fields.UNSUBSCRIBE: Action(FrameKind.CLIENT, (fields.ID,)),
    fields.ACK:         Action(FrameKind.CLIENT, (fields.ID,)),
    fields.NACK:        Action(FrameKind.CLIENT, (fields.ID,)),
    fields.BEGIN:       Action(FrameKind.CLIENT, (fields.TRANSACTION,)),
    fields.COMMIT:      Action(FrameKind.CLIENT, (fields.TRANSACTION,)),
    fields.ABORT:       Action(FrameKind.CLIENT, (fields.TRANSACTION,)),
    fields.DISCONNECT:  Action(FrameKind.CLIENT),
    fields.CONNECTED:   Action(FrameKind.SERVER),
    fields.MESSAGE:     Action(FrameKind.SERVER, (fields.DESTINATION, fields.MESSAGE_ID, fields.SUBSCRIPTION)),
    fields.RECEIPT:     Action(FrameKind.SERVER, (fields.RECEIPT_ID,)),
    fields.ERROR:       Action(FrameKind.SERVER),
}

_generic = Action(FrameKind.GENERIC)


def _header_view(name, doc):
    """ Build a read/write property that is a thin view over the header
        *name*. Assigning None removes the header.
    """

    def getter(self):
        return self.headers.get(name)

    def setter(self, value):
        if value is None:
            self.headers.pop(name, None)
        else:
            self.headers[name] = str(value)

    return property(getter, setter, doc=doc)


class Frame:
    """ The :class:`Frame` is the unit of communication in STOMP: an *action*
        naming its purpose, an ordered set of *headers*, and an optional
        *body*. Header names are unique; setting a header a second time
        replaces the value but keeps its original position, which is also
        the order used on the wire.

        The body is always stored as bytes; :attr:`text` offers the UTF-8
        view of the same data. The ``content-length`` header is never
        computed here, it only reflects what was set or received;
        :func:`stompwire.protocol.wire.pack_frame` adds it when writing.

        :ivar action: The frame's action token, such as 'SEND'.
        :ivar headers: A dictionary of header names to string values.
        :ivar body: The frame payload as bytes, or None.
    """

    def __init__(self, action, headers=None, body=None):

        self.action = action
        self.headers = dict()
        self.body = None

        if headers:
            for name, value in headers.items():
                self.headers[name] = str(value)

        if body is not None:
            self.set_body(body)


    def __eq__(self, other):
        if isinstance(other, Frame):
            pass
        else:
            return NotImplemented

        if self.action != other.action:
            return False

        if list(self.headers.items()) != list(other.headers.items()):
            return False

        return (self.body or b'') == (other.body or b'')


    __hash__ = None


    def __repr__(self):
        return 'Frame(%r, %r, %r)' % (self.action, self.headers, self.body)


    def copy(self):
        """ Return a new frame with the same action, headers and body;
            changing the headers of either does not affect the other.
        """

        duplicate = self.__class__(self.action, self.headers)
        duplicate.body = self.body
        return duplicate


    @property
    def kind(self):
        return actions.get(self.action, _generic).kind


    @property
    def is_client(self):
        return self.kind is FrameKind.CLIENT


    @property
    def is_server(self):
        return self.kind is FrameKind.SERVER


    def get_header(self, name, default=None):
        return self.headers.get(name, default)


    def set_header(self, name, value):
        self.headers[name] = str(value)


    def remove_header(self, name):
        return self.headers.pop(name, None)


    def set_body(self, body):
        """ Set the body from bytes, a bytearray, or a string; strings are
            encoded as UTF-8. An empty body is stored as None.
        """

        if body is None:
            self.body = None
            return

        if isinstance(body, str):
            body = body.encode('utf-8')
        else:
            body = bytes(body)

        if body == b'':
            body = None

        self.body = body


    @property
    def text(self):
        """ The body decoded as UTF-8, or None if there is no body. """

        if self.body is None:
            return None

        return self.body.decode('utf-8', errors='replace')


    @text.setter
    def text(self, value):
        self.set_body(value)


    @property
    def content_length(self):
        """ The integer value of the ``content-length`` header, or None if
            the header is absent or is not a non-negative integer.
        """

        value = self.headers.get(fields.CONTENT_LENGTH)
        if value is None:
            return None

        try:
            value = int(value.strip())
        except ValueError:
            return None

        if value < 0:
            return None

        return value


    @content_length.setter
    def content_length(self, value):
        if value is None:
            self.headers.pop(fields.CONTENT_LENGTH, None)
        else:
            self.headers[fields.CONTENT_LENGTH] = str(int(value))


    ack = _header_view(fields.ACK_MODE, 'Acknowledgement mode of a SUBSCRIBE frame.')
    content_type = _header_view(fields.CONTENT_TYPE, 'MIME type of the body.')
    destination = _header_view(fields.DESTINATION, 'Destination of a SEND, SUBSCRIBE or MESSAGE frame.')
    id = _header_view(fields.ID, 'Subscription id, or the id of an ACK/NACK frame.')
    message_id = _header_view(fields.MESSAGE_ID, 'Broker assigned id of a MESSAGE frame.')
    receipt = _header_view(fields.RECEIPT_REQUEST, 'Receipt requested by a client frame.')
    receipt_id = _header_view(fields.RECEIPT_ID, 'Receipt echoed in a RECEIPT or ERROR frame.')
    subscription = _header_view(fields.SUBSCRIPTION, 'Subscription a MESSAGE frame was delivered for.')
    transaction = _header_view(fields.TRANSACTION, 'Transaction a client frame belongs to.')


    def validate(self):
        """ Raise :class:`FrameError` if any header required by this frame's
            action is missing. Generic frames always validate.
        """

        action = actions.get(self.action, _generic)

        missing = list()
        for name in action.required:
            if name not in self.headers:
                missing.append(name)

        if missing:
            raise FrameError("%s frame missing required header(s): %s" % (self.action, ', '.join(missing)))

        return self


# end of class Frame



def create(action, headers=None, body=None):
    """ The frame-construction context: map an *action* token to a
        :class:`Frame`. The action is normalized by stripping surrounding
        whitespace; unknown actions still produce a generic frame.
    """

    action = action.strip()
    return Frame(action, headers, body)


def kind_of(action):
    return actions.get(action, _generic).kind


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
