"""Minimal publish/subscribe helper used for identity and state notifications."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger

type Listener[T] = Callable[[T], None]
type Unsubscribe = Callable[[], None]

log = getLogger(__name__)


class Listeners[T]:
    """Ordered set of synchronous listeners.

    Publishing iterates over a copy, so a listener may unsubscribe itself (or others)
    while being notified. A listener that raises is logged and skipped; the rest
    are still notified and the publisher never sees the exception.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener[T]] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener[T]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, value: T) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(value)
            except Exception:
                log.exception("Listener %r failed", listener)

    def clear(self) -> None:
        self._listeners.clear()
