""" Reading and writing frames over a byte stream. The stream is whatever
    the transport hands us: a connected socket, a file object wrapping one,
    or an in-memory buffer.
"""

import io
import logging
import select
import threading
import time

from .. import config
from ..protocol import frame as frame_module
from ..protocol import wire


logger = logging.getLogger(__name__)


class FrameReader:
    """ Consume a byte stream and produce :class:`stompwire.protocol.Frame`
        instances under a time budget. A single lock guards the stream: any
        number of threads may call :func:`read_frame` concurrently, but only
        one of them reads at a time, and the others give up once their own
        timeout has elapsed rather than queue behind it.

        Bytes are pulled from the stream in chunks and held in a local
        buffer; whatever frame parsing leaves behind stays in that buffer
        and is still available via :func:`read`.

        The *create* argument is the frame-construction context, a callable
        mapping an action token to a new frame; it defaults to
        :func:`stompwire.protocol.frame.create`.
    """

    def __init__(self, stream, create=None, chunk_size=None):

        if create is None:
            create = frame_module.create

        if chunk_size is None:
            chunk_size = config.chunk_size

        self.stream = stream
        self.create = create
        self.chunk_size = chunk_size
        self.lock = threading.Lock()
        self.buffer = bytearray()
        self.exhausted = False


    def read_frame(self, timeout=0):
        """ Return the next frame from the stream, or None if no frame
            arrived within *timeout* seconds. A frame that has started to
            arrive is read to completion without regard to the timeout.
            Even with a zero timeout, input that is already available is
            examined. A *timeout* of None waits indefinitely.
        """

        if timeout is None:
            deadline = None
            locked = self.lock.acquire()
        elif timeout > 0:
            deadline = time.monotonic() + timeout
            locked = self.lock.acquire(timeout=timeout)
        else:
            deadline = time.monotonic()
            locked = self.lock.acquire(blocking=False)

        if locked == False:
            return None

        try:
            action = self._read_action(deadline)
            if action is None:
                return None

            frame = self.create(action)
            self._read_headers(frame)
            self._read_body(frame)
        finally:
            self.lock.release()

        logger.debug("read %s frame", frame.action)
        return frame


    def read(self, size=-1):
        """ Read raw bytes, starting with anything buffered but not yet
            consumed by :func:`read_frame`.
        """

        with self.lock:
            if size is None or size < 0:
                while self._receive(None):
                    pass
                size = len(self.buffer)
            else:
                if len(self.buffer) == 0:
                    self._receive(None)

            data = bytes(self.buffer[:size])
            del self.buffer[:size]

        return data


    def close(self):
        self.stream.close()


    def _read_action(self, deadline):

        while True:
            if deadline is None:
                remaining = None
            else:
                remaining = deadline - time.monotonic()
                if remaining < 0:
                    remaining = 0

            if self._available(remaining) == False:
                return None

            line = self._readline()
            if line is None:
                return None

            action = wire.parse_action(line)
            if action is not None:
                return action


    def _read_headers(self, frame):

        while True:
            line = self._readline()
            if line is None or line == '':
                break

            header = wire.parse_header(line, frame.action)
            if header is None:
                continue

            name, value = header
            frame.headers[name] = value


    def _read_body(self, frame):

        buffer = self.buffer
        length = frame.content_length

        if length is not None:
            while len(buffer) < length:
                if self._receive(None) == False:
                    break

            body = bytes(buffer[:length])
            del buffer[:length]
        else:
            start = 0
            while True:
                index = buffer.find(wire.NUL, start)
                if index >= 0:
                    body = bytes(buffer[:index])
                    del buffer[:index + 1]
                    break

                start = len(buffer)
                if self._receive(None) == False:
                    body = bytes(buffer)
                    buffer.clear()
                    break

        if body:
            frame.body = body


    def _readline(self):
        """ Return the next line, decoded, without its line terminator.
            This blocks until a whole line is present; at the end of the
            stream the remaining partial line is returned, or None if
            nothing remains.
        """

        buffer = self.buffer
        start = 0

        while True:
            index = buffer.find(wire.EOL, start)
            if index >= 0:
                raw = bytes(buffer[:index])
                del buffer[:index + 1]
                return wire.decode_line(raw)

            start = len(buffer)
            if self._receive(None) == False:
                break

        if len(buffer) == 0:
            return None

        raw = bytes(buffer)
        buffer.clear()
        return wire.decode_line(raw)


    def _available(self, timeout):
        if self.buffer:
            return True
        return self._receive(timeout)


    def _receive(self, timeout):
        """ Append one chunk from the stream to the local buffer, waiting up
            to *timeout* seconds for it to arrive; None waits indefinitely.
            Return False if nothing arrived or the stream is exhausted.
        """

        if self.exhausted:
            return False

        if self._readable(timeout) == False:
            return False

        stream = self.stream

        try:
            receive = stream.recv
        except AttributeError:
            try:
                receive = stream.read1
            except AttributeError:
                receive = stream.read

        chunk = receive(self.chunk_size)

        if not chunk:
            self.exhausted = True
            return False

        self.buffer.extend(chunk)
        return True


    def _readable(self, timeout):

        try:
            self.stream.fileno()
        except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
            # In-memory streams never block; a read tells us whether
            # anything is left.
            return True

        readable, writable, errored = select.select((self.stream,), (), (), timeout)
        return len(readable) > 0


# end of class FrameReader



class FrameWriter:
    """ Serialize frames onto a byte stream. The lock around the stream is
        necessary in a multithreaded application; otherwise, if two threads
        write at the same time, the bytes of their frames can and will get
        mixed together.
    """

    def __init__(self, stream):
        self.stream = stream
        self.lock = threading.Lock()


    def write_frame(self, frame):
        data = wire.pack_frame(frame)
        self.write(data)
        logger.debug("wrote %s frame", frame.action)


    def write(self, data):

        stream = self.stream

        self.lock.acquire()
        try:
            try:
                sendall = stream.sendall
            except AttributeError:
                stream.write(data)
                try:
                    stream.flush()
                except AttributeError:
                    pass
            else:
                sendall(data)
        finally:
            self.lock.release()


    def close(self):
        self.stream.close()


# end of class FrameWriter


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
