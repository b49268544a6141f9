""" Addressing for STOMP brokers and destinations. A :class:`StompUrl` names
    both the broker to connect to and the destination within it, in the form
    ``scheme://[login[:passcode]@]host[:port]/destination``.
"""

import urllib.parse


class StompUrlError(ValueError):
    """ The text could not be parsed as a STOMP URL. """


class StompUrl:
    """ An immutable, parsed STOMP URL. Two instances are equal if their
        canonical address strings are equal; instances are hashable, so they
        can be used to key per-broker connections via :func:`base`.

        Use :func:`parse` rather than calling the constructor directly when
        the input might be None.
    """

    def __init__(self, text):

        text = str(text)

        for character in text:
            if character.isspace():
                raise StompUrlError('whitespace in URL: ' + repr(text))

        try:
            split = urllib.parse.urlsplit(text)
            port = split.port
        except ValueError as e:
            raise StompUrlError('invalid URL %r: %s' % (text, e))

        if split.scheme == '':
            raise StompUrlError('URL has no scheme: ' + repr(text))

        if split.hostname is None or split.hostname == '':
            raise StompUrlError('URL has no host: ' + repr(text))

        self._split = split
        self._port = port
        self._canonical = split.geturl()


    @classmethod
    def parse(cls, text):
        """ Return a :class:`StompUrl` for *text*, or None if *text* is None.
            Raises :class:`StompUrlError` for structurally invalid input.
        """

        if text is None:
            return None

        if isinstance(text, cls):
            return text

        return cls(text)


    def __eq__(self, other):
        if isinstance(other, StompUrl):
            return self._canonical == other._canonical
        return NotImplemented


    def __hash__(self):
        return hash(self._canonical)


    def __repr__(self):
        return 'StompUrl(%r)' % (self._canonical)


    def __str__(self):
        return self._canonical


    @property
    def scheme(self):
        return self._split.scheme


    @property
    def host(self):
        return self._split.hostname


    @property
    def port(self):
        """ The port number, or None if the URL does not specify one. """
        return self._port


    @property
    def userinfo(self):
        netloc = self._split.netloc
        if '@' in netloc:
            return netloc.rpartition('@')[0]
        return None


    @property
    def login(self):
        """ The portion of the user information before the first colon. """

        userinfo = self.userinfo
        if userinfo is None:
            return None

        return userinfo.split(':', 1)[0]


    @property
    def passcode(self):
        """ The portion of the user information after the first colon, or
            None if there is no colon.
        """

        userinfo = self.userinfo
        if userinfo is None:
            return None

        parts = userinfo.split(':', 1)
        if len(parts) > 1:
            return parts[1]

        return None


    @property
    def destination(self):
        return self._split.path


    def base(self):
        """ Return this URL with the destination stripped, leaving only the
            broker address. Destinations sharing a base share a connection.
        """

        split = self._split
        return StompUrl(urllib.parse.urlunsplit((split.scheme, split.netloc, '/', '', '')))


    def with_destination(self, destination):
        """ Return a URL for the same broker, addressing *destination*. """

        if destination is None:
            destination = ''
        if not destination.startswith('/'):
            destination = '/' + destination

        split = self._split
        return StompUrl(urllib.parse.urlunsplit((split.scheme, split.netloc, destination, '', '')))


# end of class StompUrl


parse = StompUrl.parse


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
