"""Cart and wishlist stores backed by Supabase tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

from furnisync.domain.errors import StoreError

from .client import SupabaseRestClient, eq
from .translator import CART_SELECT, WISHLIST_SELECT, parse_cart_rows, parse_wishlist_rows

if TYPE_CHECKING:
    from furnisync.domain.model import Identity
    from furnisync.domain.ports.persistence import StoredCartLine, StoredWishlistEntry

CART_TABLE = "cart_items"
WISHLIST_TABLE = "wishlist"
OWNER_ITEM_CONFLICT = "user_id,product_id"


@dataclass(slots=True)
class PostgrestCartStore:
    client: SupabaseRestClient
    table: str = CART_TABLE

    async def list_lines(self, identity: Identity) -> list[StoredCartLine]:
        rows = await self.client.select(
            self.table,
            columns=CART_SELECT,
            filters={"user_id": eq(identity.require_user_id())},
            operation="list cart lines",
        )
        try:
            return parse_cart_rows(rows)
        except ValidationError as exc:
            raise StoreError(f"Malformed cart rows: {exc}", operation="list cart lines") from exc

    async def upsert_line(self, identity: Identity, item_id: str, quantity: int) -> None:
        if quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {quantity}")
        await self.client.upsert(
            self.table,
            [{"user_id": identity.require_user_id(), "product_id": item_id, "quantity": quantity}],
            on_conflict=OWNER_ITEM_CONFLICT,
            operation="upsert cart line",
        )

    async def delete_line(self, identity: Identity, item_id: str) -> None:
        await self.client.delete(
            self.table,
            filters={"user_id": eq(identity.require_user_id()), "product_id": eq(item_id)},
            operation="delete cart line",
        )

    async def delete_all_lines(self, identity: Identity) -> None:
        await self.client.delete(
            self.table,
            filters={"user_id": eq(identity.require_user_id())},
            operation="clear cart",
        )


@dataclass(slots=True)
class PostgrestWishlistStore:
    client: SupabaseRestClient
    table: str = WISHLIST_TABLE

    async def list_entries(self, identity: Identity) -> list[StoredWishlistEntry]:
        rows = await self.client.select(
            self.table,
            columns=WISHLIST_SELECT,
            filters={"user_id": eq(identity.require_user_id())},
            order="created_at.desc",
            operation="list wishlist",
        )
        try:
            return parse_wishlist_rows(rows)
        except ValidationError as exc:
            raise StoreError(f"Malformed wishlist rows: {exc}", operation="list wishlist") from exc

    async def insert_entry(self, identity: Identity, item_id: str) -> None:
        # the (user_id, product_id) unique key turns a repeated insert into a no-op
        await self.client.upsert(
            self.table,
            [{"user_id": identity.require_user_id(), "product_id": item_id}],
            on_conflict=OWNER_ITEM_CONFLICT,
            ignore_duplicates=True,
            operation="insert wishlist entry",
        )

    async def delete_entry(self, identity: Identity, item_id: str) -> None:
        await self.client.delete(
            self.table,
            filters={"user_id": eq(identity.require_user_id()), "product_id": eq(item_id)},
            operation="delete wishlist entry",
        )


if TYPE_CHECKING:
    from furnisync.domain.ports.persistence import CartStore, WishlistStore

    def _check_ports(client: SupabaseRestClient) -> None:
        _cart: CartStore = PostgrestCartStore(client)
        _wishlist: WishlistStore = PostgrestWishlistStore(client)
