"""Reusable fakes and builders for cart and wishlist tests."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from furnisync.adapters.memory import InMemorySessionProvider
from furnisync.domain.cart import CartReconciler
from furnisync.domain.errors import StoreError
from furnisync.domain.model import CategoryRef, ItemRef
from furnisync.domain.ports.persistence import StoredCartLine, StoredWishlistEntry
from furnisync.domain.session import SessionObserver
from furnisync.domain.wishlist import WishlistReconciler

if TYPE_CHECKING:
    from furnisync.domain.model import Identity


def make_item(
    item_id: str = "chair-1",
    title: str = "Office Chair",
    *,
    category: str | None = "Chairs",
    price: Decimal | None = Decimal("4500.00"),
) -> ItemRef:
    return ItemRef(
        id=item_id,
        title=title,
        price=price,
        category=CategoryRef(name=category) if category is not None else None,
    )


class _FakeStore:
    """Shared call recording, failure injection and gating for the fake stores."""

    def __init__(self) -> None:
        self.catalog: dict[str, ItemRef] = {}
        self.calls: list[tuple[object, ...]] = []
        self.failing: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}

    def block(self, operation: str) -> asyncio.Event:
        """Hold ``operation`` until the returned event is set."""

        gate = asyncio.Event()
        self.gates[operation] = gate
        return gate

    def calls_to(self, operation: str) -> list[tuple[object, ...]]:
        return [call for call in self.calls if call[0] == operation]

    def _item(self, item_id: str) -> ItemRef:
        return self.catalog.get(item_id) or ItemRef(id=item_id, title=item_id)

    async def _enter(self, operation: str, identity: Identity, *args: object) -> None:
        self.calls.append((operation, identity.user_id, *args))
        gate = self.gates.get(operation)
        if gate is not None:
            await gate.wait()
        if operation in self.failing:
            raise StoreError(f"{operation} failed", operation=operation)


class FakeCartStore(_FakeStore):
    def __init__(self) -> None:
        super().__init__()
        self.rows: dict[str, dict[str, int]] = {}

    def seed(self, user_id: str, item: ItemRef, quantity: int = 1) -> None:
        self.catalog[item.id] = item
        self.rows.setdefault(user_id, {})[item.id] = quantity

    async def list_lines(self, identity: Identity) -> list[StoredCartLine]:
        await self._enter("list_lines", identity)
        rows = self.rows.get(identity.require_user_id(), {})
        return [
            StoredCartLine(item_id=item_id, quantity=quantity, item=self._item(item_id))
            for item_id, quantity in rows.items()
        ]

    async def upsert_line(self, identity: Identity, item_id: str, quantity: int) -> None:
        await self._enter("upsert_line", identity, item_id, quantity)
        self.rows.setdefault(identity.require_user_id(), {})[item_id] = quantity

    async def delete_line(self, identity: Identity, item_id: str) -> None:
        await self._enter("delete_line", identity, item_id)
        self.rows.get(identity.require_user_id(), {}).pop(item_id, None)

    async def delete_all_lines(self, identity: Identity) -> None:
        await self._enter("delete_all_lines", identity)
        self.rows.pop(identity.require_user_id(), None)


class FakeWishlistStore(_FakeStore):
    def __init__(self) -> None:
        super().__init__()
        self.rows: dict[str, dict[str, datetime]] = {}
        self._clock = datetime(2025, 1, 1, tzinfo=UTC)

    def seed(self, user_id: str, item: ItemRef) -> None:
        self.catalog[item.id] = item
        self._insert(user_id, item.id)

    def _insert(self, user_id: str, item_id: str) -> None:
        entries = self.rows.setdefault(user_id, {})
        if item_id in entries:
            return
        self._clock += timedelta(minutes=1)
        entries[item_id] = self._clock

    async def list_entries(self, identity: Identity) -> list[StoredWishlistEntry]:
        await self._enter("list_entries", identity)
        entries = self.rows.get(identity.require_user_id(), {})
        return [
            StoredWishlistEntry(item_id=item_id, item=self._item(item_id), created_at=created)
            for item_id, created in sorted(entries.items(), key=lambda pair: pair[1], reverse=True)
        ]

    async def insert_entry(self, identity: Identity, item_id: str) -> None:
        await self._enter("insert_entry", identity, item_id)
        self._insert(identity.require_user_id(), item_id)

    async def delete_entry(self, identity: Identity, item_id: str) -> None:
        await self._enter("delete_entry", identity, item_id)
        self.rows.get(identity.require_user_id(), {}).pop(item_id, None)


async def started_cart(
    store: FakeCartStore,
    user_id: str | None = None,
) -> tuple[InMemorySessionProvider, CartReconciler]:
    """Cart reconciler over a started session, with the first load finished."""

    provider = InMemorySessionProvider(user_id)
    session = SessionObserver(provider)
    cart = CartReconciler(store, session)
    await session.start()
    await cart.wait_loaded()
    return provider, cart


async def started_wishlist(
    store: FakeWishlistStore,
    user_id: str | None = None,
) -> tuple[InMemorySessionProvider, WishlistReconciler]:
    provider = InMemorySessionProvider(user_id)
    session = SessionObserver(provider)
    wishlist = WishlistReconciler(store, session)
    await session.start()
    await wishlist.wait_loaded()
    return provider, wishlist
