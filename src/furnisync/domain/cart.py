"""Optimistic cart state for the current identity."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, ClassVar, Final

from furnisync.domain import derivations
from furnisync.domain.errors import StoreError
from furnisync.domain.model import EMPTY_CART, CartState
from furnisync.domain.reconciler import Reconciler
from furnisync.domain.results import MutationResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from furnisync.domain.model import Identity, ItemRef
    from furnisync.domain.ports.persistence import CartStore, StoredCartLine
    from furnisync.domain.session import SessionObserver


log = getLogger(__name__)

UPDATE_FAILED: Final[str] = "Failed to update cart"
REMOVE_FAILED: Final[str] = "Failed to remove item"
QUANTITY_FAILED: Final[str] = "Failed to update quantity"
CLEAR_FAILED: Final[str] = "Failed to clear cart"


def cart_from_rows(rows: Iterable[StoredCartLine]) -> CartState:
    """Fold remote rows into a cart, merging repeated items and skipping empty lines."""

    cart = EMPTY_CART
    for row in rows:
        if row.quantity < 1:
            log.warning("Ignoring cart row for %s with quantity %s", row.item_id, row.quantity)
            continue
        cart = cart.with_item_added(row.item, row.quantity)
    return cart


class CartReconciler(Reconciler[CartState]):
    """Cart lines for the current identity, applied locally before the store confirms.

    Anonymous carts live only in memory and every mutation succeeds. For signed-in
    users each mutation is persisted after it has been applied; if the store fails,
    the cart is restored to the exact state it had before the mutation. Concurrent
    mutations are not serialised: the last remote write wins.
    """

    label: ClassVar[str] = "cart"

    def __init__(self, store: CartStore, session: SessionObserver) -> None:
        self._store = store
        super().__init__(session)

    def _empty_state(self) -> CartState:
        return EMPTY_CART

    async def _fetch(self, identity: Identity) -> CartState:
        return cart_from_rows(await self._store.list_lines(identity))

    @property
    def total_item_count(self) -> int:
        return derivations.total_item_count(self.state)

    def is_in_cart(self, item_id: str) -> bool:
        return derivations.is_in_cart(self.state, item_id)

    def outbound_summary(self) -> str:
        return derivations.build_outbound_summary(self.state)

    def outbound_url(self, phone_number: str) -> str | None:
        return derivations.build_outbound_url(self.state, phone_number)

    async def add_item(self, item: ItemRef) -> MutationResult:
        previous = self.state
        updated = previous.with_item_added(item)
        self._set_state(updated)
        quantity = updated.quantity_of(item.id)
        return await self._persist(
            previous,
            UPDATE_FAILED,
            lambda identity: self._store.upsert_line(identity, item.id, quantity),
        )

    async def remove_item(self, item_id: str) -> MutationResult:
        previous = self.state
        if item_id not in previous:
            return MutationResult.unchanged()
        self._set_state(previous.without_item(item_id))
        return await self._persist(
            previous,
            REMOVE_FAILED,
            lambda identity: self._store.delete_line(identity, item_id),
        )

    async def update_quantity(self, item_id: str, quantity: int) -> MutationResult:
        if quantity <= 0:
            return await self.remove_item(item_id)
        previous = self.state
        line = previous.find(item_id)
        if line is None or line.quantity == quantity:
            return MutationResult.unchanged()
        self._set_state(previous.with_quantity(item_id, quantity))
        return await self._persist(
            previous,
            QUANTITY_FAILED,
            lambda identity: self._store.upsert_line(identity, item_id, quantity),
        )

    async def clear(self) -> MutationResult:
        """Empty the cart; for signed-in users every stored row is deleted too."""

        previous = self.state
        self._set_state(EMPTY_CART)
        return await self._persist(previous, CLEAR_FAILED, self._store.delete_all_lines)

    async def _persist(
        self,
        previous: CartState,
        failure_message: str,
        call: Callable[[Identity], Awaitable[None]],
    ) -> MutationResult:
        identity = self.identity
        if not identity.is_authenticated:
            return MutationResult.applied()

        generation = self._generation
        try:
            await call(identity)
        except StoreError:
            if self._is_stale(generation):
                log.info("Ignoring failed cart write for %s: context is gone", identity)
                return MutationResult.abandoned()
            log.warning("%s for %s, rolling back", failure_message, identity, exc_info=True)
            self._set_state(previous)
            return MutationResult.rolled_back(failure_message)
        return MutationResult.applied()
