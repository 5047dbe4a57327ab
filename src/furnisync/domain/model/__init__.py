"""Public domain model surface."""

from __future__ import annotations

from furnisync.domain.model.cart import EMPTY_CART, CartLine, CartState
from furnisync.domain.model.catalog import DEFAULT_CATEGORY_NAME, CategoryRef, ItemRef
from furnisync.domain.model.identity import ANONYMOUS, Identity
from furnisync.domain.model.wishlist import EMPTY_WISHLIST, WishlistEntry, WishlistState

__all__ = [  # noqa: RUF022
    # identity
    "ANONYMOUS",
    "Identity",
    # catalog
    "DEFAULT_CATEGORY_NAME",
    "CategoryRef",
    "ItemRef",
    # cart
    "EMPTY_CART",
    "CartLine",
    "CartState",
    # wishlist
    "EMPTY_WISHLIST",
    "WishlistEntry",
    "WishlistState",
]
