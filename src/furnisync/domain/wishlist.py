"""Wishlist state for signed-in users."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, ClassVar, Final

from furnisync.domain import derivations
from furnisync.domain.errors import StoreError
from furnisync.domain.model import EMPTY_WISHLIST, WishlistEntry, WishlistState
from furnisync.domain.reconciler import Reconciler
from furnisync.domain.results import MutationResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from furnisync.domain.model import Identity, ItemRef
    from furnisync.domain.ports.persistence import StoredWishlistEntry, WishlistStore
    from furnisync.domain.session import SessionObserver


log = getLogger(__name__)

LOGIN_REQUIRED: Final[str] = "Please login to use wishlist"
ADD_FAILED: Final[str] = "Failed to add to wishlist"
REMOVE_FAILED: Final[str] = "Failed to remove from wishlist"


def wishlist_from_rows(rows: Iterable[StoredWishlistEntry]) -> WishlistState:
    entries: list[WishlistEntry] = []
    seen: set[str] = set()
    for row in rows:
        if row.item_id in seen:
            continue
        seen.add(row.item_id)
        entries.append(WishlistEntry(item=row.item, created_at=row.created_at))
    return WishlistState(tuple(entries))


class WishlistReconciler(Reconciler[WishlistState]):
    """Wishlist entries for the current identity.

    Unlike the cart there is no anonymous mode: mutations made while signed out
    report ``AUTH_REQUIRED`` without touching local state. Adding an item that is
    already present is a successful no-op. When the store rejects a change, the
    whole wishlist is reloaded from the store instead of restoring a snapshot.
    """

    label: ClassVar[str] = "wishlist"

    def __init__(self, store: WishlistStore, session: SessionObserver) -> None:
        self._store = store
        super().__init__(session)

    def _empty_state(self) -> WishlistState:
        return EMPTY_WISHLIST

    async def _fetch(self, identity: Identity) -> WishlistState:
        return wishlist_from_rows(await self._store.list_entries(identity))

    def is_in_wishlist(self, item_id: str) -> bool:
        return derivations.is_in_wishlist(self.state, item_id)

    async def add_item(self, item: ItemRef) -> MutationResult:
        identity = self.identity
        if not identity.is_authenticated:
            return MutationResult.auth_required(LOGIN_REQUIRED)
        if item.id in self.state:
            return MutationResult.unchanged()

        self._set_state(self.state.with_entry(WishlistEntry(item=item)))
        generation = self._generation
        try:
            await self._store.insert_entry(identity, item.id)
        except StoreError:
            return await self._recover(generation, identity, ADD_FAILED)
        return MutationResult.applied("Added to wishlist")

    async def remove_item(self, item_id: str) -> MutationResult:
        identity = self.identity
        if not identity.is_authenticated:
            return MutationResult.auth_required(LOGIN_REQUIRED)
        if item_id not in self.state:
            return MutationResult.unchanged()

        self._set_state(self.state.without_item(item_id))
        generation = self._generation
        try:
            await self._store.delete_entry(identity, item_id)
        except StoreError:
            return await self._recover(generation, identity, REMOVE_FAILED)
        return MutationResult.applied("Removed from wishlist")

    async def _recover(self, generation: int, identity: Identity, message: str) -> MutationResult:
        if self._is_stale(generation):
            log.info("Ignoring failed wishlist write for %s: context is gone", identity)
            return MutationResult.abandoned()
        log.warning("%s for %s, reloading", message, identity, exc_info=True)
        await self.load()
        return MutationResult.reloaded(message)
