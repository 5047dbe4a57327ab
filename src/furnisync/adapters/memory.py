"""In-process session provider for local runs and tests."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from furnisync.domain.listeners import Listeners
from furnisync.domain.model import ANONYMOUS, Identity

if TYPE_CHECKING:
    from furnisync.domain.listeners import Unsubscribe
    from furnisync.domain.ports.session import IdentityCallback

log = getLogger(__name__)


class InMemorySessionProvider:
    """Session provider whose identity is set directly by the caller."""

    def __init__(self, user_id: str | None = None) -> None:
        self._identity = Identity(user_id) if user_id is not None else ANONYMOUS
        self._listeners: Listeners[Identity] = Listeners()

    @property
    def identity(self) -> Identity:
        return self._identity

    async def get_current_identity(self) -> Identity:
        return self._identity

    def on_identity_change(self, callback: IdentityCallback) -> Unsubscribe:
        return self._listeners.subscribe(callback)

    def sign_in(self, user_id: str) -> Identity:
        self._identity = Identity.authenticated(user_id)
        log.debug("Signed in %s", user_id)
        self._listeners.publish(self._identity)
        return self._identity

    def sign_out(self) -> None:
        self._identity = ANONYMOUS
        self._listeners.publish(self._identity)

    def refresh(self) -> None:
        """Re-announce the current identity, as a token refresh would."""

        self._listeners.publish(self._identity)
