"""Application wiring: one storefront session with its cart and wishlist."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from furnisync.adapters.http_resilience import ResilientClient
from furnisync.adapters.memory import InMemorySessionProvider
from furnisync.adapters.sqlalchemy.stores import (
    SqlAlchemyCartStore,
    SqlAlchemyCatalog,
    SqlAlchemyWishlistStore,
)
from furnisync.adapters.sqlalchemy.unit_of_work import is_started, startup
from furnisync.adapters.supabase import (
    PostgrestCartStore,
    PostgrestWishlistStore,
    SupabaseRestClient,
    SupabaseSessionProvider,
)
from furnisync.config import MessagingConfig, get_messaging_config, get_supabase_config
from furnisync.domain.cart import CartReconciler
from furnisync.domain.derivations import build_product_inquiry_url
from furnisync.domain.session import SessionObserver
from furnisync.domain.wishlist import WishlistReconciler

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from furnisync.config import SupabaseConfig
    from furnisync.domain.model import Identity, ItemRef
    from furnisync.domain.ports import CartStore, SessionProvider, WishlistStore

Closer = Callable[[], Awaitable[None]]

log = getLogger(__name__)


@dataclass(slots=True)
class Storefront:
    """The session observer and both reconcilers for one running storefront."""

    provider: SessionProvider
    session: SessionObserver
    cart: CartReconciler
    wishlist: WishlistReconciler
    messaging: MessagingConfig = field(default_factory=MessagingConfig)
    catalog: SqlAlchemyCatalog | None = None
    closers: list[Closer] = field(default_factory=list)

    async def start(self) -> Identity:
        """Resolve the initial identity and wait for the first cart/wishlist load."""

        identity = await self.session.start()
        await self.cart.wait_loaded()
        await self.wishlist.wait_loaded()
        log.info(
            "Storefront ready for %s: %s cart item(s), %s wishlist entr(ies)",
            identity,
            self.cart.total_item_count,
            len(self.wishlist.state),
        )
        return identity

    def cart_inquiry_url(self) -> str | None:
        return self.cart.outbound_url(self.messaging.phone_number)

    def product_inquiry_url(self, item: ItemRef) -> str:
        return build_product_inquiry_url(item.title, self.messaging.phone_number)

    async def aclose(self) -> None:
        self.cart.close()
        self.wishlist.close()
        self.session.close()
        for closer in self.closers:
            await closer()
        self.closers.clear()


def assemble_storefront(
    provider: SessionProvider,
    cart_store: CartStore,
    wishlist_store: WishlistStore,
    *,
    messaging: MessagingConfig | None = None,
    catalog: SqlAlchemyCatalog | None = None,
    closers: list[Closer] | None = None,
) -> Storefront:
    """Wire reconcilers to an arbitrary provider and pair of stores."""

    session = SessionObserver(provider)
    return Storefront(
        provider=provider,
        session=session,
        cart=CartReconciler(cart_store, session),
        wishlist=WishlistReconciler(wishlist_store, session),
        messaging=messaging or get_messaging_config(),
        catalog=catalog,
        closers=closers or [],
    )


def ensure_local_database(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
) -> None:
    """Start the SQLAlchemy adapter (running migrations) unless already started."""

    if is_started():
        return
    startup(engine=engine, database_uri=database_uri)


def build_local_storefront(
    user_id: str | None = None,
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    messaging: MessagingConfig | None = None,
) -> Storefront:
    """Storefront over the local SQL database, acting as ``user_id`` (or anonymous)."""

    ensure_local_database(engine=engine, database_uri=database_uri)
    return assemble_storefront(
        InMemorySessionProvider(user_id),
        SqlAlchemyCartStore(),
        SqlAlchemyWishlistStore(),
        messaging=messaging,
        catalog=SqlAlchemyCatalog(),
    )


def build_supabase_storefront(
    config: SupabaseConfig | None = None,
    *,
    http: ResilientClient | None = None,
    messaging: MessagingConfig | None = None,
) -> Storefront:
    """Storefront backed by a Supabase project; sign in through ``storefront.provider``."""

    effective_config = config or get_supabase_config()
    client = http or ResilientClient(effective_config.resilience)
    provider = SupabaseSessionProvider(effective_config, http=client)
    rest = SupabaseRestClient(effective_config, http=client, token_source=provider.access_token)
    return assemble_storefront(
        provider,
        PostgrestCartStore(rest),
        PostgrestWishlistStore(rest),
        messaging=messaging,
        closers=[client.aclose],
    )
