"""Public interface for the Supabase adapter."""

from __future__ import annotations

from .auth import AuthSession, SupabaseSessionProvider
from .client import SupabaseRestClient, eq
from .stores import PostgrestCartStore, PostgrestWishlistStore
from .translator import parse_cart_rows, parse_item_ref, parse_wishlist_rows

__all__ = [
    "AuthSession",
    "PostgrestCartStore",
    "PostgrestWishlistStore",
    "SupabaseRestClient",
    "SupabaseSessionProvider",
    "eq",
    "parse_cart_rows",
    "parse_item_ref",
    "parse_wishlist_rows",
]
