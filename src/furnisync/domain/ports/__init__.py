"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import CartStore, StoredCartLine, StoredWishlistEntry, WishlistStore
from .session import IdentityCallback, SessionProvider

__all__ = [
    "CartStore",
    "IdentityCallback",
    "SessionProvider",
    "StoredCartLine",
    "StoredWishlistEntry",
    "WishlistStore",
]
