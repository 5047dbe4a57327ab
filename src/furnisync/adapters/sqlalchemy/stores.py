"""Async cart/wishlist store ports implemented on the local SQL database.

Session work runs synchronously on the event loop thread. The local database is
SQLite, where each call is short, and an in-memory engine only exists on the
thread that created it, so the calls are not moved to worker threads.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from furnisync.adapters.sqlalchemy.repositories import UnknownProductError
from furnisync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, StartupError
from furnisync.domain.errors import StoreError

if TYPE_CHECKING:
    from furnisync.domain.model import Identity, ItemRef
    from furnisync.domain.ports.persistence import StoredCartLine, StoredWishlistEntry

UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]

log = getLogger(__name__)


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (SQLAlchemyError, StartupError, UnknownProductError) as exc:
        raise StoreError(f"{operation}: {exc}", operation=operation) from exc


@dataclass(slots=True)
class SqlAlchemyCartStore:
    """Cart rows in the ``cart_items`` table.

    The session work is synchronous; the coroutine interface only exists so the
    store satisfies the same port as the HTTP-backed one.
    """

    unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyUnitOfWork

    async def list_lines(self, identity: Identity) -> list[StoredCartLine]:
        user_id = identity.require_user_id()
        with _store_errors("list cart lines"), self.unit_of_work_factory() as uow:
            return uow.repositories.cart_items.list_for_user(user_id)

    async def upsert_line(self, identity: Identity, item_id: str, quantity: int) -> None:
        if quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {quantity}")
        user_id = identity.require_user_id()
        with _store_errors("upsert cart line"), self.unit_of_work_factory() as uow:
            uow.repositories.cart_items.set_quantity(user_id, item_id, quantity)
            uow.commit()

    async def delete_line(self, identity: Identity, item_id: str) -> None:
        user_id = identity.require_user_id()
        with _store_errors("delete cart line"), self.unit_of_work_factory() as uow:
            deleted = uow.repositories.cart_items.delete(user_id, item_id)
            uow.commit()
        log.debug("Deleted %s cart row(s) for %s/%s", deleted, user_id, item_id)

    async def delete_all_lines(self, identity: Identity) -> None:
        user_id = identity.require_user_id()
        with _store_errors("clear cart"), self.unit_of_work_factory() as uow:
            deleted = uow.repositories.cart_items.delete_for_user(user_id)
            uow.commit()
        log.debug("Cleared %s cart row(s) for %s", deleted, user_id)


@dataclass(slots=True)
class SqlAlchemyWishlistStore:
    unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyUnitOfWork

    async def list_entries(self, identity: Identity) -> list[StoredWishlistEntry]:
        user_id = identity.require_user_id()
        with _store_errors("list wishlist"), self.unit_of_work_factory() as uow:
            return uow.repositories.wishlist.list_for_user(user_id)

    async def insert_entry(self, identity: Identity, item_id: str) -> None:
        user_id = identity.require_user_id()
        with _store_errors("insert wishlist entry"), self.unit_of_work_factory() as uow:
            if uow.repositories.wishlist.add(user_id, item_id):
                uow.commit()
            else:
                log.debug("Wishlist already holds %s for %s", item_id, user_id)

    async def delete_entry(self, identity: Identity, item_id: str) -> None:
        user_id = identity.require_user_id()
        with _store_errors("delete wishlist entry"), self.unit_of_work_factory() as uow:
            uow.repositories.wishlist.delete(user_id, item_id)
            uow.commit()


@dataclass(slots=True)
class SqlAlchemyCatalog:
    """Catalog access for seeding products and resolving item snapshots."""

    unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyUnitOfWork

    def add_item(self, item: ItemRef) -> None:
        with _store_errors("add catalog item"), self.unit_of_work_factory() as uow:
            uow.repositories.catalog.add(item)
            uow.commit()

    def get_item(self, item_id: str) -> ItemRef | None:
        with _store_errors("get catalog item"), self.unit_of_work_factory() as uow:
            return uow.repositories.catalog.get(item_id)

    def list_items(self) -> list[ItemRef]:
        with _store_errors("list catalog"), self.unit_of_work_factory() as uow:
            return uow.repositories.catalog.query()


if TYPE_CHECKING:
    from furnisync.domain.ports.persistence import CartStore, WishlistStore

    _cart_check: CartStore = SqlAlchemyCartStore()
    _wishlist_check: WishlistStore = SqlAlchemyWishlistStore()
