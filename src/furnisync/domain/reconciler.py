"""Shared lifecycle for reconcilers that mirror remote rows in local state."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from furnisync.domain.errors import StoreError
from furnisync.domain.listeners import Listeners
from furnisync.domain.model import ANONYMOUS, Identity

if TYPE_CHECKING:
    from furnisync.domain.listeners import Listener, Unsubscribe
    from furnisync.domain.session import SessionObserver


log = getLogger(__name__)


class Reconciler[TState](ABC):
    """Owns the local state for the current identity and keeps it in step with a store.

    Identity changes discard the previous state immediately. Authenticated identities
    then trigger a background reload; anonymous ones stay empty without touching the
    store. Results that arrive after the identity changed again, or after
    :meth:`close`, are ignored.

    All methods must be called from the event loop that drives the session observer.
    """

    label: ClassVar[str]

    def __init__(self, session: SessionObserver) -> None:
        self._identity: Identity = ANONYMOUS
        self._state: TState = self._empty_state()
        self._changes: Listeners[TState] = Listeners()
        self._generation = 0
        self._synced = False
        self._pending_loads = 0
        self._load_task: asyncio.Task[None] | None = None
        self._closed = False
        self._unsubscribe_session: Unsubscribe | None = session.subscribe(
            self._on_identity_change
        )
        if session.ready:
            self._on_identity_change(session.identity)

    @abstractmethod
    def _empty_state(self) -> TState: ...

    @abstractmethod
    async def _fetch(self, identity: Identity) -> TState: ...

    @property
    def state(self) -> TState:
        return self._state

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def is_loading(self) -> bool:
        if not self._synced or self._pending_loads > 0:
            return True
        return self._load_task is not None and not self._load_task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def on_change(self, listener: Listener[TState]) -> Unsubscribe:
        """Call ``listener`` with the new state after every committed local change."""

        return self._changes.subscribe(listener)

    async def load(self) -> None:
        """Replace local state with the store's rows for the current identity.

        Never raises for store failures: those are logged and leave the local state
        as it was.
        """

        identity = self._identity
        generation = self._generation
        if not identity.is_authenticated:
            self._set_state(self._empty_state())
            return

        self._pending_loads += 1
        try:
            state = await self._fetch(identity)
        except StoreError:
            log.exception("Failed to load %s for %s", self.label, identity)
            return
        finally:
            self._pending_loads -= 1

        if self._is_stale(generation):
            log.debug("Discarding %s loaded for %s: identity changed", self.label, identity)
            return
        self._set_state(state)

    async def wait_loaded(self) -> None:
        """Wait for the reload triggered by the latest identity change, if any."""

        while self._load_task is not None and not self._load_task.done():
            await self._load_task

    def close(self) -> None:
        """Detach from the session; in-flight calls finish but their results are ignored."""

        if self._unsubscribe_session is not None:
            self._unsubscribe_session()
            self._unsubscribe_session = None
        self._changes.clear()
        self._closed = True

    def _on_identity_change(self, identity: Identity) -> None:
        if self._closed:
            return
        if self._synced and identity == self._identity:
            return
        self._synced = True
        self._identity = identity
        self._generation += 1
        self._set_state(self._empty_state())
        if identity.is_authenticated:
            loop = asyncio.get_running_loop()
            self._load_task = loop.create_task(self.load(), name=f"{self.label}-load")

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    def _set_state(self, state: TState) -> None:
        if state == self._state:
            return
        self._state = state
        self._changes.publish(state)
