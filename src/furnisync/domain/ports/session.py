"""Port for the authentication session provider."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from furnisync.domain.model import Identity

if TYPE_CHECKING:
    from furnisync.domain.listeners import Unsubscribe

type IdentityCallback = Callable[[Identity], None]


@runtime_checkable
class SessionProvider(Protocol):
    """Source of truth for who is signed in.

    ``on_identity_change`` callbacks are pushed synchronously by the provider on
    every login, logout and token refresh; there is no polling.
    """

    async def get_current_identity(self) -> Identity: ...

    def on_identity_change(self, callback: IdentityCallback) -> Unsubscribe: ...


__all__ = ["IdentityCallback", "SessionProvider"]
