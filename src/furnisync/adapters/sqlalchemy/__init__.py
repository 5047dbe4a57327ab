"""SQLAlchemy adapter package for furnisync."""

from __future__ import annotations

from .mappings import (
    cart_item_table,
    category_table,
    metadata,
    product_table,
    wishlist_table,
)
from .repositories import (
    SqlAlchemyCartItemRepository,
    SqlAlchemyCatalogRepository,
    SqlAlchemyWishlistRepository,
    UnknownProductError,
)

__all__ = [
    "SqlAlchemyCartItemRepository",
    "SqlAlchemyCatalogRepository",
    "SqlAlchemyWishlistRepository",
    "UnknownProductError",
    "cart_item_table",
    "category_table",
    "metadata",
    "product_table",
    "wishlist_table",
]
