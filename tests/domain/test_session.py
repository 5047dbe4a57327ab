from __future__ import annotations

import asyncio

import pytest

from furnisync.adapters.memory import InMemorySessionProvider
from furnisync.domain.cart import CartReconciler
from furnisync.domain.errors import AuthenticationError
from furnisync.domain.listeners import Listeners
from furnisync.domain.model import ANONYMOUS, Identity
from furnisync.domain.session import SessionObserver
from furnisync.domain.wishlist import WishlistReconciler
from tests.helpers.storefront import FakeCartStore, FakeWishlistStore, make_item


class _FailingProvider(InMemorySessionProvider):
    async def get_current_identity(self) -> Identity:
        raise AuthenticationError("refresh token revoked")


class _RacingProvider(InMemorySessionProvider):
    """Pushes a newer identity while the initial lookup is still in flight."""

    async def get_current_identity(self) -> Identity:
        stale = self.identity
        self.sign_in("pushed-user")
        return stale


def test_start_delivers_initial_identity() -> None:
    async def scenario() -> None:
        observer = SessionObserver(InMemorySessionProvider("user-1"))
        seen: list[Identity] = []
        observer.subscribe(seen.append)

        assert not observer.ready
        identity = await observer.start()

        assert identity == Identity("user-1")
        assert observer.ready
        assert await observer.wait_ready() == identity
        assert seen == [identity]

    asyncio.run(scenario())


def test_push_during_start_wins_over_lookup() -> None:
    async def scenario() -> None:
        observer = SessionObserver(_RacingProvider())

        identity = await observer.start()

        assert identity == Identity("pushed-user")

    asyncio.run(scenario())


def test_lookup_failure_falls_back_to_anonymous() -> None:
    async def scenario() -> None:
        observer = SessionObserver(_FailingProvider("user-1"))

        assert await observer.start() == ANONYMOUS
        assert observer.ready

    asyncio.run(scenario())


def test_changes_and_refreshes_are_forwarded() -> None:
    async def scenario() -> None:
        provider = InMemorySessionProvider()
        observer = SessionObserver(provider)
        seen: list[Identity] = []
        observer.subscribe(seen.append)
        await observer.start()

        provider.sign_in("user-1")
        provider.refresh()
        provider.sign_out()

        assert seen == [ANONYMOUS, Identity("user-1"), Identity("user-1"), ANONYMOUS]
        assert observer.identity == ANONYMOUS

    asyncio.run(scenario())


def test_close_stops_forwarding() -> None:
    async def scenario() -> None:
        provider = InMemorySessionProvider("user-1")
        observer = SessionObserver(provider)
        seen: list[Identity] = []
        observer.subscribe(seen.append)
        await observer.start()

        observer.close()
        provider.sign_out()

        assert observer.closed
        assert seen == [Identity("user-1")]
        assert observer.identity == Identity("user-1")
        with pytest.raises(RuntimeError, match="closed"):
            await observer.start()

    asyncio.run(scenario())


def test_start_twice_is_rejected() -> None:
    async def scenario() -> None:
        observer = SessionObserver(InMemorySessionProvider())
        await observer.start()

        with pytest.raises(RuntimeError, match="already started"):
            await observer.start()

    asyncio.run(scenario())


def test_listeners_may_unsubscribe_while_publishing() -> None:
    listeners: Listeners[int] = Listeners()
    received: list[tuple[str, int]] = []

    def once(value: int) -> None:
        received.append(("once", value))
        unsubscribe_once()

    unsubscribe_once = listeners.subscribe(once)
    listeners.subscribe(lambda value: received.append(("always", value)))

    listeners.publish(1)
    listeners.publish(2)

    assert received == [("once", 1), ("always", 1), ("always", 2)]
    assert len(listeners) == 1


def test_failing_listener_does_not_block_later_listeners(
    caplog: pytest.LogCaptureFixture,
) -> None:
    listeners: Listeners[int] = Listeners()
    received: list[int] = []

    def broken(_value: int) -> None:
        raise RuntimeError("listener bug")

    listeners.subscribe(broken)
    listeners.subscribe(received.append)

    listeners.publish(7)

    assert received == [7]
    assert "listener bug" in caplog.text


def test_sign_out_reaches_every_reconciler_despite_failing_cart_listener() -> None:
    async def scenario() -> None:
        chair = make_item()
        cart_store = FakeCartStore()
        cart_store.seed("user-1", chair)
        wishlist_store = FakeWishlistStore()
        wishlist_store.seed("user-1", chair)
        provider = InMemorySessionProvider("user-1")
        observer = SessionObserver(provider)
        cart = CartReconciler(cart_store, observer)
        wishlist = WishlistReconciler(wishlist_store, observer)
        await observer.start()
        await cart.wait_loaded()
        await wishlist.wait_loaded()
        assert wishlist.state.item_ids == (chair.id,)

        def broken(_state: object) -> None:
            raise RuntimeError("ui listener bug")

        cart.on_change(broken)
        provider.sign_out()
        await wishlist.wait_loaded()

        assert not cart.identity.is_authenticated
        assert cart.state.is_empty
        assert not wishlist.identity.is_authenticated
        assert wishlist.state.is_empty

    asyncio.run(scenario())
