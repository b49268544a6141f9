"""Connection-scoped session layer.

A :class:`Connection` owns one byte stream and everything that shares it:
the frame reader and writer, the interceptor registry, and the table of
active subscriptions. There is no process-wide state; two connections never
see each other's frames.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Union

from .. import config
from ..protocol import factory, fields
from ..protocol.frame import Frame
from ..protocol.url import StompUrl
from .base import ErrorFrameReceived, TransportConnectionError, TransportTimeout
from .interceptor import Interceptor, Interceptors, Matcher, has_action, has_header, has_url
from .stream import FrameReader, FrameWriter


logger = logging.getLogger(__name__)


class PendingSend:
    """Client-side helper that ties one outbound frame to its completion.

    Completion is signalled from the interceptor dispatch: the first frame
    satisfying the send is stored as :attr:`response`, any later ones only
    bump :attr:`count`. The correlating interceptor stays registered until
    a :meth:`wait` sees the send complete, or until :meth:`cancel`.
    """

    def __init__(self, url: StompUrl, frame: Frame):
        self.url = url
        self.frame = frame
        self.response: Optional[Frame] = None
        self.count = 0
        self.event = threading.Event()
        self.interceptor: Optional[Interceptor] = None
        self._interceptors: Optional[Interceptors] = None
        self._lock = threading.Lock()

    @property
    def receipt(self) -> Optional[str]:
        return self.frame.receipt

    @property
    def failed(self) -> bool:
        return self.response is not None and self.response.action == fields.ERROR

    def poll(self) -> bool:
        """Return True if the send is complete, otherwise return False."""
        return self.event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block up to *timeout* seconds; return whether the send completed.

        A *timeout* of None means the configured default, never forever.
        """
        if timeout is None:
            timeout = config.timeout

        done = self.event.wait(timeout)
        if done:
            self.cancel()
        return done

    def result(self, timeout: Optional[float] = None) -> Frame:
        """Return the frame that completed the send.

        Raises :class:`TransportTimeout` if none arrived in time, and
        :class:`ErrorFrameReceived` if the broker answered with ERROR.
        """
        if not self.wait(timeout):
            self.cancel()
            raise TransportTimeout(f"{self.frame.action}: no response from {self.url}")

        if self.failed:
            raise ErrorFrameReceived(self.response)

        return self.response

    def cancel(self) -> None:
        """Stop waiting for completion."""
        if self._interceptors is not None and self.interceptor is not None:
            self._interceptors.remove(self.interceptor)

    def _complete(self, url: Optional[StompUrl], frame: Frame) -> None:
        with self._lock:
            self.count += 1
            if self.event.is_set():
                return
            self.response = frame
            self.event.set()

    def __repr__(self):
        return f"PendingSend({self.frame.action} {self.url}, complete={self.poll()})"


class Connection:
    """One STOMP connection over an already-open stream.

    *url* addresses the broker; only its base is kept. *stream* is read
    from, and written to unless a separate *output* stream is supplied.
    Frames read by :meth:`poll` (or by the background thread started with
    :meth:`start`) and frames written by :meth:`transmit_frame` are both
    dispatched through :attr:`interceptors`.
    """

    def __init__(self, url, stream, output=None, create=None):
        url = StompUrl.parse(url)
        if url is None:
            raise ValueError("a connection requires a broker URL")

        if output is None:
            output = stream

        self.url = url.base()
        self.stream = stream
        self.output = output
        self.reader = FrameReader(stream, create)
        self.writer = FrameWriter(output)
        self.interceptors = Interceptors()
        self.subscriptions: Dict[str, StompUrl] = {}
        self.server: Optional[Frame] = None

        self.poll_interval = config.poll_interval
        self.shutdown = False
        self.closed = False
        self.error: Optional[BaseException] = None
        self.thread: Optional[threading.Thread] = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def version(self) -> Optional[str]:
        """Protocol version agreed in the handshake."""
        if self.server is None:
            return None
        return self.server.get_header(fields.VERSION, "1.0")

    # --- interceptors ---
    def add_interceptor(self, matcher, callback=None, once: bool = False) -> Interceptor:
        return self.interceptors.add(matcher, callback, once)

    def remove_interceptor(self, interceptor: Interceptor) -> bool:
        return self.interceptors.remove(interceptor)

    # --- reading ---
    def read_frame(self, timeout: float = 0) -> Optional[Frame]:
        """Read one frame without dispatching it."""
        return self.reader.read_frame(timeout)

    def poll(self, timeout: float = 0) -> Optional[Frame]:
        """Read one frame and dispatch it to the interceptors."""
        frame = self.reader.read_frame(timeout)
        if frame is not None:
            self.interceptors.dispatch(self.resolve(frame), frame)
        return frame

    def resolve(self, frame: Frame) -> StompUrl:
        """Return the URL an inbound frame belongs to."""
        subscription = frame.subscription
        if subscription is not None:
            url = self.subscriptions.get(subscription)
            if url is not None:
                return url

        destination = frame.destination
        if destination:
            return self.url.with_destination(destination)

        return self.url

    def start(self) -> None:
        """Read and dispatch frames on a background thread until closed."""
        if self.thread is not None:
            return

        self.thread = threading.Thread(target=self.run, name=f"stompwire {self.url}")
        self.thread.daemon = True
        self.thread.start()

    def run(self) -> None:
        reader = self.reader

        while self.shutdown == False:
            try:
                self.poll(self.poll_interval)
            except (OSError, ValueError) as e:
                # ValueError is what select() raises for a closed socket.
                if self.shutdown:
                    break
                self.error = e
                logger.exception("reading from %s failed", self.url)
                break

            if reader.exhausted and len(reader.buffer) == 0:
                logger.debug("stream for %s ended", self.url)
                break

    # --- writing ---
    def transmit_frame(self, url, frame: Frame, receipt: Union[bool, str] = True) -> PendingSend:
        """Write *frame* and return a handle that completes when it is answered.

        How completion is recognized:

        - a frame carrying a ``receipt`` header completes on the RECEIPT or
          ERROR frame echoing it. With *receipt* true (the default) client
          frames get a generated receipt id; a string is used as the id.
        - CONNECT and STOMP frames complete on CONNECTED or ERROR.
        - a SEND without a receipt completes on the next ACK or NACK seen for
          the same destination URL.
        - anything else completes as soon as it is written.

        The frame that goes out is a copy; *frame* itself is left as the
        caller built it, so it can be transmitted again with a fresh receipt.
        A frame missing a header its action requires raises
        :class:`stompwire.protocol.FrameError` before anything is written.
        """
        if self.closed:
            raise TransportConnectionError(f"connection to {self.url} is closed")

        url = StompUrl.parse(url)
        if url is None:
            url = self.url

        frame = frame.copy()
        action = frame.action

        if action in (fields.SEND, fields.SUBSCRIBE) and not frame.destination:
            frame.destination = url.destination

        frame.validate()

        if frame.receipt is None and frame.is_client and action not in (fields.CONNECT, fields.STOMP):
            if isinstance(receipt, str):
                frame.receipt = receipt
            elif receipt:
                frame.receipt = factory.next_id()

        pending = PendingSend(url, frame)
        pending._interceptors = self.interceptors

        matcher = self._correlate(url, frame)
        if matcher is not None:
            pending.interceptor = self.interceptors.add(matcher, pending._complete)

        if action == fields.SUBSCRIBE:
            self.subscriptions[frame.id] = url

        try:
            self.writer.write_frame(frame)
        except Exception:
            pending.cancel()
            if action == fields.SUBSCRIBE:
                self.subscriptions.pop(frame.id, None)
            raise

        if action == fields.UNSUBSCRIBE:
            self.subscriptions.pop(frame.id, None)

        if matcher is None:
            pending._complete(url, frame)

        self.interceptors.dispatch(url, frame)
        return pending

    def _correlate(self, url: StompUrl, frame: Frame) -> Optional[Matcher]:
        receipt = frame.receipt
        if receipt is not None:
            return has_action(fields.RECEIPT, fields.ERROR) & has_header(fields.RECEIPT_ID, receipt)

        action = frame.action
        if action in (fields.CONNECT, fields.STOMP):
            return has_action(fields.CONNECTED, fields.ERROR)

        if action == fields.SEND:
            return has_url(url) & has_action(fields.ACK, fields.NACK)

        return None

    # --- lifecycle ---
    def connect(self, login: Optional[str] = None, passcode: Optional[str] = None,
                timeout: Optional[float] = None, **headers) -> Frame:
        """Perform the CONNECT handshake; return the CONNECTED frame.

        The caller must be reading frames, either via :meth:`start` or by
        calling :meth:`poll`, otherwise the CONNECTED frame is never seen.
        """
        host = headers.pop("host", None) or self.url.host
        frame = factory.connect(host, login, passcode)
        for name, value in headers.items():
            frame.set_header(name.replace("_", "-"), value)

        pending = self.transmit_frame(self.url, frame)

        try:
            self.server = pending.result(timeout)
        except TransportTimeout:
            logger.warning("no CONNECTED frame from %s", self.url)
            raise
        except ErrorFrameReceived as e:
            raise TransportConnectionError(f"{self.url} refused connection: {e}")

        return self.server

    def disconnect(self, timeout: Optional[float] = None) -> bool:
        """Send DISCONNECT, wait for its receipt, then close."""
        try:
            pending = self.transmit_frame(self.url, factory.disconnect())
            done = pending.wait(timeout)
        finally:
            self.close()
        return done

    def close(self) -> None:
        if self.closed:
            return

        self.closed = True
        self.shutdown = True

        self.interceptors.clear()

        try:
            self.stream.close()
        finally:
            if self.output is not self.stream:
                self.output.close()

        thread = self.thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(self.poll_interval * 2)

    def __repr__(self):
        return f"Connection({self.url!r})"
