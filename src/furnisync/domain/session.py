"""Observe the authentication provider and fan identity changes out to consumers."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from furnisync.domain.errors import AuthenticationError
from furnisync.domain.listeners import Listeners
from furnisync.domain.model import ANONYMOUS, Identity

if TYPE_CHECKING:
    from furnisync.domain.listeners import Listener, Unsubscribe
    from furnisync.domain.ports.session import SessionProvider


log = getLogger(__name__)


class SessionObserver:
    """Single writer of the current identity.

    The observer becomes ready once the first identity has been delivered, either by
    the one-shot lookup in :meth:`start` or by an earlier push from the provider.
    Every later push is forwarded to subscribers synchronously, including pushes that
    repeat the current identity (token refreshes).
    """

    def __init__(self, provider: SessionProvider) -> None:
        self._provider = provider
        self._identity: Identity = ANONYMOUS
        self._ready = asyncio.Event()
        self._listeners: Listeners[Identity] = Listeners()
        self._unsubscribe_provider: Unsubscribe | None = None
        self._closed = False

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> Identity:
        """Subscribe to the provider and resolve the initial identity."""

        if self._closed:
            raise RuntimeError("session observer is closed")
        if self._unsubscribe_provider is not None:
            raise RuntimeError("session observer already started")

        self._unsubscribe_provider = self._provider.on_identity_change(self._handle_change)
        try:
            initial = await self._provider.get_current_identity()
        except AuthenticationError:
            log.warning(
                "Could not resolve the current session, continuing anonymously",
                exc_info=True,
            )
            initial = ANONYMOUS

        # a push that landed while we were waiting is newer than the one-shot result
        if not self.ready and not self._closed:
            self._deliver(initial)
        return self._identity

    async def wait_ready(self) -> Identity:
        await self._ready.wait()
        return self._identity

    def subscribe(self, listener: Listener[Identity]) -> Unsubscribe:
        return self._listeners.subscribe(listener)

    def close(self) -> None:
        """Stop listening to the provider and drop all subscribers."""

        if self._unsubscribe_provider is not None:
            self._unsubscribe_provider()
            self._unsubscribe_provider = None
        self._listeners.clear()
        self._closed = True

    def _handle_change(self, identity: Identity) -> None:
        if self._closed:
            return
        self._deliver(identity)

    def _deliver(self, identity: Identity) -> None:
        if identity != self._identity:
            log.info("Session identity changed: %s -> %s", self._identity, identity)
        self._identity = identity
        self._ready.set()
        self._listeners.publish(identity)
