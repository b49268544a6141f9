""" The client ties connections to URLs: every distinct broker address, as
    given by :func:`stompwire.protocol.url.StompUrl.base`, gets exactly one
    :class:`stompwire.transport.session.Connection`, which is opened and
    handshaken on first use and shared by every destination on that broker.
"""

import logging
import socket
import threading

from . import config
from . import json
from .protocol import factory
from .protocol import fields
from .protocol.frame import Frame
from .protocol.url import StompUrl
from .transport.interceptor import Interceptor, has_action, has_header
from .transport.session import Connection


logger = logging.getLogger(__name__)


def open_socket(url):
    """ The default connector: a plain TCP connection to the broker. """

    port = url.port
    if port is None:
        port = config.default_port

    return socket.create_connection((url.host, port))



class Client:
    """ Send to and subscribe on STOMP destinations addressed by URL. The
        *connector* is a callable accepting a :class:`StompUrl` and returning
        an open stream to that broker; the default opens a TCP socket. The
        *timeout*, in seconds, bounds the handshake and the wait for the
        receipts of subscribe/unsubscribe requests.
    """

    def __init__(self, connector=None, timeout=None):

        if connector is None:
            connector = open_socket

        if timeout is None:
            timeout = config.timeout

        self.connector = connector
        self.timeout = timeout
        self.connections = dict()
        self.interceptors = list()
        self.subscriptions = dict()
        self.lock = threading.RLock()


    def __enter__(self):
        return self


    def __exit__(self, *exc_info):
        self.close()


    def connection(self, url):
        """ Return the established :class:`Connection` for the broker that
            *url* points at, opening it if necessary. Login and passcode for
            the handshake come from the URL.
        """

        url = StompUrl.parse(url)
        base = url.base()

        with self.lock:
            try:
                return self.connections[base]
            except KeyError:
                pass

            interceptors = list(self.interceptors)

        # The lock is not held while opening the stream or during the
        # handshake.

        stream = self.connector(url)
        connection = Connection(base, stream)

        for interceptor in interceptors:
            connection.add_interceptor(interceptor)

        connection.start()

        try:
            connection.connect(url.login, url.passcode, self.timeout)
        except Exception:
            connection.close()
            raise

        with self.lock:
            existing = self.connections.get(base)

            if existing is None:
                self.connections[base] = connection

                for interceptor in self.interceptors:
                    if interceptor not in interceptors:
                        connection.add_interceptor(interceptor)

                for interceptor in interceptors:
                    if interceptor not in self.interceptors:
                        connection.remove_interceptor(interceptor)

        if existing is not None:
            # Another thread connected to the same broker first.
            self._disconnect(connection)
            return existing

        logger.debug("connected to %s, STOMP %s", base, connection.version)
        return connection


    def add_interceptor(self, matcher, callback=None, once=False):
        """ Register an interceptor on every connection, including those
            opened later. Note that a one-shot interceptor fires once per
            connection.
        """

        if isinstance(matcher, Interceptor):
            interceptor = matcher
        else:
            interceptor = Interceptor(matcher, callback, once)

        with self.lock:
            self.interceptors.append(interceptor)
            for connection in self.connections.values():
                connection.add_interceptor(interceptor)

        return interceptor


    def remove_interceptor(self, interceptor):

        removed = False

        with self.lock:
            try:
                self.interceptors.remove(interceptor)
            except ValueError:
                pass
            else:
                removed = True

            for connection in self.connections.values():
                connection.remove_interceptor(interceptor)

        return removed


    def transmit_frame(self, url, frame, receipt=True):
        url = StompUrl.parse(url)
        connection = self.connection(url)
        return connection.transmit_frame(url, frame, receipt)


    def send(self, url, body=None, headers=None, receipt=True):
        """ Send *body* to the destination named by *url*. The body may be a
            ready-made :class:`Frame`, a string, bytes, or any other value,
            which is serialized as JSON. A frame that names its own
            destination is sent there instead, on the same broker.
            Returns the :class:`stompwire.transport.session.PendingSend`.
        """

        url = StompUrl.parse(url)

        if isinstance(body, Frame):
            frame = body
        else:
            frame = factory.send(url.destination)

            if body is None or isinstance(body, (str, bytes, bytearray)):
                frame.set_body(body)
            else:
                frame.set_body(json.dumps(body))
                frame.content_type = json.content_type

        if headers:
            for name, value in headers.items():
                frame.set_header(name, value)

        destination = frame.destination
        if destination and destination != url.destination:
            url = url.with_destination(destination)

        return self.transmit_frame(url, frame, receipt)


    def subscribe(self, url, callback, ack=fields.ACK_AUTO, headers=None):
        """ Subscribe to the destination named by *url*; *callback* is invoked
            with every MESSAGE frame delivered for it. With the 'client' or
            'client-individual' *ack* modes the return value of *callback*
            decides the answer: truthy sends ACK, falsy sends NACK. Returns
            the subscription id.
        """

        url = StompUrl.parse(url)
        connection = self.connection(url)

        if headers is None:
            headers = dict()

        frame = factory.subscribe(url.destination, ack=ack)
        for name, value in headers.items():
            frame.set_header(name, value)

        id = frame.id

        def deliver(message_url, message):

            if ack == fields.ACK_AUTO:
                callback(message)
                return

            try:
                accepted = callback(message)
            except Exception:
                logger.exception("subscriber for %s failed, rejecting message", message_url)
                accepted = False

            if accepted:
                reply = factory.ack(message)
            else:
                reply = factory.nack(message)

            connection.transmit_frame(message_url, reply, receipt=False)

        matcher = has_action(fields.MESSAGE) & has_header(fields.SUBSCRIPTION, id)
        interceptor = connection.add_interceptor(matcher, deliver)

        with self.lock:
            self.subscriptions[id] = (url, connection, interceptor)

        try:
            connection.transmit_frame(url, frame).result(self.timeout)
        except Exception:
            self._forget(id)
            raise

        return id


    def unsubscribe(self, id):
        """ End the subscription *id*, as returned by :func:`subscribe`. """

        subscription = self._forget(id)
        if subscription is None:
            raise KeyError('no such subscription: ' + str(id))

        url, connection, interceptor = subscription

        frame = factory.unsubscribe(id)
        connection.transmit_frame(url, frame).result(self.timeout)


    def _forget(self, id):

        with self.lock:
            subscription = self.subscriptions.pop(id, None)

        if subscription is not None:
            url, connection, interceptor = subscription
            connection.remove_interceptor(interceptor)

        return subscription


    def close(self):
        """ Disconnect from every broker. """

        with self.lock:
            connections = list(self.connections.values())
            self.connections.clear()
            self.subscriptions.clear()

        for connection in connections:
            self._disconnect(connection)


    def _disconnect(self, connection):

        try:
            connection.disconnect(self.timeout)
        except OSError:
            logger.warning("broker %s went away before DISCONNECT", connection.url)


# end of class Client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
