from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from furnisync.adapters.sqlalchemy.stores import (
    SqlAlchemyCartStore,
    SqlAlchemyCatalog,
    SqlAlchemyWishlistStore,
)
from furnisync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown
from furnisync.domain.errors import StoreError
from furnisync.domain.model import CategoryRef, Identity, ItemRef

if TYPE_CHECKING:
    from collections.abc import Callable

USER = Identity("user-1")
CHAIR = ItemRef(
    id="chair-1",
    title="Office Chair",
    price=Decimal("4500.00"),
    category=CategoryRef(name="Chairs"),
)


def test_catalog_adds_and_lists_items(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    catalog = SqlAlchemyCatalog(sqlite_unit_of_work)

    catalog.add_item(CHAIR)

    assert catalog.get_item("chair-1") is not None
    assert [item.id for item in catalog.list_items()] == ["chair-1"]


def test_cart_store_round_trip(sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]) -> None:
    SqlAlchemyCatalog(sqlite_unit_of_work).add_item(CHAIR)
    store = SqlAlchemyCartStore(sqlite_unit_of_work)

    async def scenario() -> None:
        await store.upsert_line(USER, "chair-1", 2)
        lines = await store.list_lines(USER)
        assert [(line.item_id, line.quantity) for line in lines] == [("chair-1", 2)]
        assert lines[0].item.category_name == "Chairs"

        await store.delete_line(USER, "chair-1")
        assert await store.list_lines(USER) == []

        await store.upsert_line(USER, "chair-1", 1)
        await store.delete_all_lines(USER)
        assert await store.list_lines(USER) == []

    asyncio.run(scenario())


def test_cart_store_maps_unknown_product_to_store_error(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    store = SqlAlchemyCartStore(sqlite_unit_of_work)

    with pytest.raises(StoreError) as excinfo:
        asyncio.run(store.upsert_line(USER, "ghost", 1))

    assert excinfo.value.operation == "upsert cart line"


def test_cart_store_requires_authenticated_identity(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    store = SqlAlchemyCartStore(sqlite_unit_of_work)

    with pytest.raises(ValueError, match="authenticated"):
        asyncio.run(store.list_lines(Identity()))


def test_wishlist_store_insert_is_idempotent(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    SqlAlchemyCatalog(sqlite_unit_of_work).add_item(CHAIR)
    store = SqlAlchemyWishlistStore(sqlite_unit_of_work)

    async def scenario() -> None:
        await store.insert_entry(USER, "chair-1")
        await store.insert_entry(USER, "chair-1")
        entries = await store.list_entries(USER)
        assert [entry.item_id for entry in entries] == ["chair-1"]

        await store.delete_entry(USER, "chair-1")
        assert await store.list_entries(USER) == []

    asyncio.run(scenario())


def test_wishlist_store_maps_unknown_product_to_store_error(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    store = SqlAlchemyWishlistStore(sqlite_unit_of_work)

    with pytest.raises(StoreError, match="insert wishlist entry"):
        asyncio.run(store.insert_entry(USER, "ghost"))


def test_stores_report_uninitialised_database_as_store_error() -> None:
    shutdown()
    cart = SqlAlchemyCartStore(SqlAlchemyUnitOfWork)
    wishlist = SqlAlchemyWishlistStore(SqlAlchemyUnitOfWork)

    with pytest.raises(StoreError) as excinfo:
        asyncio.run(cart.list_lines(USER))
    assert excinfo.value.operation == "list cart lines"

    with pytest.raises(StoreError, match="not initialised"):
        asyncio.run(wishlist.list_entries(USER))
