"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, insert, select, update

from furnisync.adapters.sqlalchemy.mappings import (
    cart_item_table,
    category_table,
    product_table,
    wishlist_table,
)
from furnisync.domain.model import CategoryRef, ItemRef
from furnisync.domain.ports.persistence import StoredCartLine, StoredWishlistEntry

if TYPE_CHECKING:
    from sqlalchemy import Row, Select
    from sqlalchemy.orm import Session


class UnknownProductError(LookupError):
    """Raised when a cart or wishlist row would reference a product not in the catalog."""


def _slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def _item_columns() -> tuple[object, ...]:
    return (
        product_table.c.id,
        product_table.c.title,
        product_table.c.slug,
        product_table.c.price,
        product_table.c.image_url,
        category_table.c.name.label("category_name"),
        category_table.c.slug.label("category_slug"),
    )


def _item_from_row(row: Row[tuple[object, ...]]) -> ItemRef:
    mapping = row._mapping  # noqa: SLF001
    category = (
        CategoryRef(name=mapping["category_name"], slug=mapping["category_slug"])
        if mapping["category_name"] is not None
        else None
    )
    return ItemRef(
        id=mapping["id"],
        title=mapping["title"],
        slug=mapping["slug"],
        price=mapping["price"],
        image_url=mapping["image_url"],
        category=category,
    )


class SqlAlchemyCatalogRepository:
    """Products and categories, so that cart rows can embed item snapshots."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, item: ItemRef) -> None:
        """Insert or update a product (and its category) from a snapshot."""

        category_id = self._ensure_category(item.category) if item.category else None
        values = {
            "title": item.title,
            "slug": item.slug,
            "price": item.price,
            "image_url": item.image_url,
            "category_id": category_id,
        }
        if self.exists(item.id):
            self.session.execute(
                update(product_table).where(product_table.c.id == item.id).values(**values)
            )
        else:
            self.session.execute(insert(product_table).values(id=item.id, **values))

    def exists(self, item_id: str) -> bool:
        stmt = select(func.count()).select_from(product_table).where(product_table.c.id == item_id)
        return bool(self.session.execute(stmt).scalar_one())

    def get(self, item_id: str) -> ItemRef | None:
        row = self.session.execute(
            self._select_items().where(product_table.c.id == item_id)
        ).first()
        return _item_from_row(row) if row is not None else None

    def query(self) -> list[ItemRef]:
        rows = self.session.execute(self._select_items().order_by(product_table.c.title))
        return [_item_from_row(row) for row in rows]

    def _ensure_category(self, category: CategoryRef) -> str:
        slug = category.slug or _slugify(category.name)
        existing = self.session.execute(
            select(category_table.c.id).where(category_table.c.slug == slug)
        ).scalar_one_or_none()
        if existing is not None:
            return existing
        self.session.execute(insert(category_table).values(id=slug, name=category.name, slug=slug))
        return slug

    @staticmethod
    def _select_items() -> Select[tuple[object, ...]]:
        return select(*_item_columns()).select_from(
            product_table.outerjoin(
                category_table, product_table.c.category_id == category_table.c.id
            )
        )


class SqlAlchemyCartItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(self, user_id: str) -> list[StoredCartLine]:
        stmt = (
            select(cart_item_table.c.quantity, *_item_columns())
            .select_from(
                cart_item_table.join(
                    product_table, cart_item_table.c.product_id == product_table.c.id
                ).outerjoin(category_table, product_table.c.category_id == category_table.c.id)
            )
            .where(cart_item_table.c.user_id == user_id)
            .order_by(cart_item_table.c.created_at, cart_item_table.c.id)
        )
        lines: list[StoredCartLine] = []
        for row in self.session.execute(stmt):
            item = _item_from_row(row)
            quantity = row._mapping["quantity"]  # noqa: SLF001
            lines.append(
                StoredCartLine(
                    item_id=item.id,
                    quantity=quantity if quantity is not None else 1,
                    item=item,
                )
            )
        return lines

    def set_quantity(self, user_id: str, product_id: str, quantity: int) -> None:
        _require_product(self.session, product_id)
        result = self.session.execute(
            update(cart_item_table)
            .where(
                cart_item_table.c.user_id == user_id,
                cart_item_table.c.product_id == product_id,
            )
            .values(quantity=quantity)
        )
        if result.rowcount == 0:
            self.session.execute(
                insert(cart_item_table).values(
                    user_id=user_id, product_id=product_id, quantity=quantity
                )
            )

    def delete(self, user_id: str, product_id: str) -> int:
        result = self.session.execute(
            delete(cart_item_table).where(
                cart_item_table.c.user_id == user_id,
                cart_item_table.c.product_id == product_id,
            )
        )
        return result.rowcount

    def delete_for_user(self, user_id: str) -> int:
        result = self.session.execute(
            delete(cart_item_table).where(cart_item_table.c.user_id == user_id)
        )
        return result.rowcount


class SqlAlchemyWishlistRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(self, user_id: str) -> list[StoredWishlistEntry]:
        stmt = (
            select(wishlist_table.c.created_at, *_item_columns())
            .select_from(
                wishlist_table.join(
                    product_table, wishlist_table.c.product_id == product_table.c.id
                ).outerjoin(category_table, product_table.c.category_id == category_table.c.id)
            )
            .where(wishlist_table.c.user_id == user_id)
            .order_by(wishlist_table.c.created_at.desc(), wishlist_table.c.id)
        )
        entries: list[StoredWishlistEntry] = []
        for row in self.session.execute(stmt):
            item = _item_from_row(row)
            entries.append(
                StoredWishlistEntry(
                    item_id=item.id,
                    item=item,
                    created_at=row._mapping["created_at"],  # noqa: SLF001
                )
            )
        return entries

    def exists(self, user_id: str, product_id: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(wishlist_table)
            .where(
                wishlist_table.c.user_id == user_id,
                wishlist_table.c.product_id == product_id,
            )
        )
        return bool(self.session.execute(stmt).scalar_one())

    def add(self, user_id: str, product_id: str) -> bool:
        """Insert the pair unless it already exists; return whether a row was added."""

        if self.exists(user_id, product_id):
            return False
        _require_product(self.session, product_id)
        self.session.execute(insert(wishlist_table).values(user_id=user_id, product_id=product_id))
        return True

    def delete(self, user_id: str, product_id: str) -> int:
        result = self.session.execute(
            delete(wishlist_table).where(
                wishlist_table.c.user_id == user_id,
                wishlist_table.c.product_id == product_id,
            )
        )
        return result.rowcount


def _require_product(session: Session, product_id: str) -> None:
    if not SqlAlchemyCatalogRepository(session).exists(product_id):
        raise UnknownProductError(f"Unknown product: {product_id}")
