"""Ports for the remote cart and wishlist stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from furnisync.domain.model import Identity, ItemRef


@dataclass(frozen=True, slots=True)
class StoredCartLine:
    """A cart row as listed by the remote store, with its embedded item snapshot."""

    item_id: str
    quantity: int
    item: ItemRef


@dataclass(frozen=True, slots=True)
class StoredWishlistEntry:
    item_id: str
    item: ItemRef
    created_at: datetime | None = None


@runtime_checkable
class CartStore(Protocol):
    """Durable cart rows keyed by (identity, item).

    Every method may raise ``StoreError``; implementations must not leak transport
    or driver exceptions.
    """

    async def list_lines(self, identity: Identity) -> Sequence[StoredCartLine]: ...

    async def upsert_line(self, identity: Identity, item_id: str, quantity: int) -> None: ...

    async def delete_line(self, identity: Identity, item_id: str) -> None: ...

    async def delete_all_lines(self, identity: Identity) -> None: ...


@runtime_checkable
class WishlistStore(Protocol):
    """Durable wishlist rows keyed by (identity, item).

    ``insert_entry`` is idempotent: inserting an existing pair succeeds silently.
    """

    async def list_entries(self, identity: Identity) -> Sequence[StoredWishlistEntry]: ...

    async def insert_entry(self, identity: Identity, item_id: str) -> None: ...

    async def delete_entry(self, identity: Identity, item_id: str) -> None: ...
