from __future__ import annotations

import asyncio

from furnisync.domain.ports.persistence import StoredWishlistEntry
from furnisync.domain.results import MutationStatus
from furnisync.domain.wishlist import wishlist_from_rows
from tests.helpers.storefront import FakeWishlistStore, make_item, started_wishlist

CHAIR = make_item("chair-1", "Office Chair", category="Chairs")
SOFA = make_item("sofa-1", "Sofa Set", category="Sofas")


def test_wishlist_from_rows_keeps_first_occurrence() -> None:
    rows = [
        StoredWishlistEntry(item_id=SOFA.id, item=SOFA),
        StoredWishlistEntry(item_id=CHAIR.id, item=CHAIR),
        StoredWishlistEntry(item_id=SOFA.id, item=SOFA),
    ]

    assert wishlist_from_rows(rows).item_ids == (SOFA.id, CHAIR.id)


def test_anonymous_mutations_require_login() -> None:
    async def scenario() -> None:
        store = FakeWishlistStore()
        _, wishlist = await started_wishlist(store)

        added = await wishlist.add_item(CHAIR)
        removed = await wishlist.remove_item(CHAIR.id)

        for result in (added, removed):
            assert result.status is MutationStatus.AUTH_REQUIRED
            assert result.needs_authentication
            assert result.message == "Please login to use wishlist"
        assert wishlist.state.is_empty
        assert store.calls == []

    asyncio.run(scenario())


def test_add_twice_leaves_single_entry() -> None:
    async def scenario() -> None:
        store = FakeWishlistStore()
        _, wishlist = await started_wishlist(store, "user-1")

        first = await wishlist.add_item(CHAIR)
        second = await wishlist.add_item(CHAIR)

        assert first.status is MutationStatus.APPLIED
        assert first.message == "Added to wishlist"
        assert second.status is MutationStatus.UNCHANGED
        assert second.ok
        assert wishlist.state.item_ids == (CHAIR.id,)
        assert len(store.calls_to("insert_entry")) == 1

    asyncio.run(scenario())


def test_concurrent_adds_of_same_item_are_idempotent() -> None:
    async def scenario() -> None:
        store = FakeWishlistStore()
        _, wishlist = await started_wishlist(store, "user-1")

        results = await asyncio.gather(wishlist.add_item(CHAIR), wishlist.add_item(CHAIR))

        assert all(result.ok for result in results)
        assert wishlist.state.item_ids == (CHAIR.id,)
        assert list(store.rows["user-1"]) == [CHAIR.id]

    asyncio.run(scenario())


def test_new_entries_are_shown_first() -> None:
    async def scenario() -> None:
        store = FakeWishlistStore()
        store.seed("user-1", SOFA)
        _, wishlist = await started_wishlist(store, "user-1")

        await wishlist.add_item(CHAIR)

        assert wishlist.state.item_ids == (CHAIR.id, SOFA.id)
        assert wishlist.is_in_wishlist(CHAIR.id)

    asyncio.run(scenario())


def test_remove_entry() -> None:
    async def scenario() -> None:
        store = FakeWishlistStore()
        store.seed("user-1", SOFA)
        _, wishlist = await started_wishlist(store, "user-1")

        result = await wishlist.remove_item(SOFA.id)
        missing = await wishlist.remove_item(CHAIR.id)

        assert result.message == "Removed from wishlist"
        assert missing.status is MutationStatus.UNCHANGED
        assert not wishlist.is_in_wishlist(SOFA.id)
        assert store.rows["user-1"] == {}

    asyncio.run(scenario())


def test_failed_remove_reloads_from_store() -> None:
    async def scenario() -> None:
        store = FakeWishlistStore()
        store.seed("user-1", SOFA)
        store.seed("user-1", CHAIR)
        _, wishlist = await started_wishlist(store, "user-1")

        store.failing.add("delete_entry")
        result = await wishlist.remove_item(SOFA.id)

        assert result.status is MutationStatus.RELOADED
        assert result.message == "Failed to remove from wishlist"
        assert wishlist.state.item_ids == (CHAIR.id, SOFA.id)
        assert len(store.calls_to("list_entries")) == 2

    asyncio.run(scenario())


def test_failed_add_reloads_from_store() -> None:
    async def scenario() -> None:
        store = FakeWishlistStore()
        _, wishlist = await started_wishlist(store, "user-1")

        store.failing.add("insert_entry")
        result = await wishlist.add_item(CHAIR)

        assert result.status is MutationStatus.RELOADED
        assert result.message == "Failed to add to wishlist"
        assert wishlist.state.is_empty

    asyncio.run(scenario())


def test_sign_out_clears_wishlist() -> None:
    async def scenario() -> None:
        store = FakeWishlistStore()
        store.seed("user-1", SOFA)
        provider, wishlist = await started_wishlist(store, "user-1")

        provider.sign_out()

        assert wishlist.state.is_empty
        assert len(store.calls_to("list_entries")) == 1

    asyncio.run(scenario())


def test_failure_after_sign_out_is_abandoned() -> None:
    async def scenario() -> None:
        store = FakeWishlistStore()
        provider, wishlist = await started_wishlist(store, "user-1")
        store.failing.add("insert_entry")
        gate = store.block("insert_entry")

        pending = asyncio.create_task(wishlist.add_item(CHAIR))
        await asyncio.sleep(0)
        provider.sign_out()
        gate.set()
        result = await pending

        assert result.status is MutationStatus.ABANDONED
        assert wishlist.state.is_empty
        assert len(store.calls_to("list_entries")) == 1

    asyncio.run(scenario())
