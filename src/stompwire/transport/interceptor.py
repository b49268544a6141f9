"""Interceptor dispatch.

An interceptor pairs a matcher, a predicate over ``(url, action, frame)``,
with a callback. Every frame passing through a connection, inbound or
outbound, is offered to the registered interceptors in registration order;
the callback of each interceptor whose matcher accepts the frame is invoked
synchronously, in the thread that read or wrote the frame. Callbacks should
therefore return promptly, or frame delivery stalls behind them.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List, Optional

from ..protocol.frame import Frame
from ..protocol.url import StompUrl


logger = logging.getLogger(__name__)

Predicate = Callable[[Optional[StompUrl], str, Frame], bool]
Callback = Callable[[Optional[StompUrl], Frame], Any]


class Matcher:
    """A conjunction of predicates; it matches when all of them do.

    Matchers combine with ``&``. A matcher with no predicates matches
    every frame.
    """

    def __init__(self, *predicates: Predicate):
        self.predicates = tuple(predicates)

    def __call__(self, url: Optional[StompUrl], action: str, frame: Frame) -> bool:
        for predicate in self.predicates:
            if not predicate(url, action, frame):
                return False
        return True

    def __and__(self, other: Predicate) -> "Matcher":
        if isinstance(other, Matcher):
            return Matcher(*(self.predicates + other.predicates))
        return Matcher(*(self.predicates + (other,)))


def has_url(url) -> Matcher:
    """Match frames addressed to exactly *url*."""
    url = StompUrl.parse(url)

    def predicate(candidate, action, frame):
        return candidate is not None and candidate == url

    return Matcher(predicate)


def has_base(url) -> Matcher:
    """Match frames for any destination on the broker *url* points at."""
    base = StompUrl.parse(url).base()

    def predicate(candidate, action, frame):
        return candidate is not None and candidate.base() == base

    return Matcher(predicate)


def has_action(*actions: str) -> Matcher:
    actions = frozenset(actions)

    def predicate(url, action, frame):
        return action in actions

    return Matcher(predicate)


def has_header(name: str, value: Any) -> Matcher:
    value = str(value)

    def predicate(url, action, frame):
        return frame.headers.get(name) == value

    return Matcher(predicate)


def has_body(test: Callable[[Optional[bytes]], bool]) -> Matcher:
    """Match on the raw body bytes, which may be None."""

    def predicate(url, action, frame):
        return bool(test(frame.body))

    return Matcher(predicate)


def has_text(test: Callable[[Optional[str]], bool]) -> Matcher:
    """Match on the body decoded as text, which may be None."""

    def predicate(url, action, frame):
        return bool(test(frame.text))

    return Matcher(predicate)


class Interceptor:
    """A registered matcher/callback pair; also the handle for removal."""

    def __init__(self, matcher: Predicate, callback: Callback, once: bool = False):
        if not callable(callback):
            raise TypeError("callback must be callable")

        self.matcher = matcher
        self.callback = callback
        self.once = once

    def matches(self, url: Optional[StompUrl], frame: Frame) -> bool:
        return bool(self.matcher(url, frame.action, frame))

    def __repr__(self):
        return f"Interceptor({self.callback!r}, once={self.once})"


class InterceptorBuilder:
    """Fluent construction of an :class:`Interceptor`.

    Example::

        interceptor = (
            InterceptorBuilder()
            .url(url)
            .action("ACK")
            .body_as_string(holder.set)
            .build()
        )
    """

    def __init__(self):
        self._predicates: List[Predicate] = []
        self._callback: Optional[Callback] = None
        self._once = False

    # Matching
    def url(self, url):
        self._predicates.append(has_url(url))
        return self

    def base(self, url):
        self._predicates.append(has_base(url))
        return self

    def action(self, *actions: str):
        self._predicates.append(has_action(*actions))
        return self

    def header(self, name: str, value: Any):
        self._predicates.append(has_header(name, value))
        return self

    def body_matches(self, test: Callable[[Optional[bytes]], bool]):
        self._predicates.append(has_body(test))
        return self

    def text_matches(self, test: Callable[[Optional[str]], bool]):
        self._predicates.append(has_text(test))
        return self

    def match(self, predicate: Predicate):
        self._predicates.append(predicate)
        return self

    def once(self):
        self._once = True
        return self

    # Callback shapes
    def callback(self, callback: Callback):
        self._callback = callback
        return self

    def frame(self, consumer: Callable[[Frame], Any]):
        self._callback = lambda url, frame: consumer(frame)
        return self

    def body(self, consumer: Callable[[Optional[bytes]], Any]):
        self._callback = lambda url, frame: consumer(frame.body)
        return self

    def body_as_string(self, consumer: Callable[[Optional[str]], Any]):
        self._callback = lambda url, frame: consumer(frame.text)
        return self

    # Finalize
    def build(self) -> Interceptor:
        if self._callback is None:
            raise ValueError("Interceptor callback not specified")

        return Interceptor(Matcher(*self._predicates), self._callback, self._once)


def builder() -> InterceptorBuilder:
    return InterceptorBuilder()


def for_body_as_string(url, consumer: Callable[[Optional[str]], Any], *actions: str) -> Interceptor:
    """Pass the text body of frames for *url* to *consumer*.

    With no *actions* every action matches.
    """
    built = InterceptorBuilder().url(url)
    if actions:
        built.action(*actions)
    return built.body_as_string(consumer).build()


class Interceptors:
    """Registry of interceptors, ordered by registration.

    Registration and removal may happen while another thread is
    dispatching; each dispatch pass works on a snapshot of the entries
    taken when it starts.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: List[Interceptor] = []

    def __len__(self):
        return len(self._entries)

    def __contains__(self, interceptor):
        return interceptor in self._entries

    def add(self, matcher, callback: Optional[Callback] = None, once: bool = False) -> Interceptor:
        """Register an interceptor and return it as the removal handle.

        *matcher* is either a ready-built :class:`Interceptor`, in which case
        *callback* and *once* are ignored, or a predicate over
        ``(url, action, frame)``.
        """
        if isinstance(matcher, Interceptor):
            interceptor = matcher
        else:
            interceptor = Interceptor(matcher, callback, once)

        with self._lock:
            self._entries.append(interceptor)

        return interceptor

    def remove(self, interceptor: Interceptor) -> bool:
        with self._lock:
            try:
                self._entries.remove(interceptor)
            except ValueError:
                return False
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def dispatch(self, url: Optional[StompUrl], frame: Frame) -> int:
        """Invoke every matching interceptor for *frame*; return how many fired."""

        with self._lock:
            snapshot = list(self._entries)

        fired = 0

        for interceptor in snapshot:
            try:
                matched = interceptor.matches(url, frame)
            except Exception:
                logger.exception("interceptor matcher failed for %s frame", frame.action)
                continue

            if not matched:
                continue

            # A one-shot interceptor belongs to whichever dispatch removes
            # it first; a concurrent pass that lost the race skips it.
            if interceptor.once and not self.remove(interceptor):
                continue

            fired += 1

            try:
                interceptor.callback(url, frame)
            except Exception:
                logger.exception("interceptor callback failed for %s frame", frame.action)

        return fired
