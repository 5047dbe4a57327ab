"""Point-in-time snapshots of catalog data embedded in cart and wishlist rows."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal  # noqa: TC003
from typing import Final

DEFAULT_CATEGORY_NAME: Final[str] = "Furniture"


@dataclass(frozen=True, slots=True)
class CategoryRef:
    name: str
    slug: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ItemRef:
    """Display fields of a catalog item, captured when a line was created or loaded.

    This is not a live reference: refreshing the snapshot is the job of the remote
    store, which embeds current product data whenever rows are listed.
    """

    id: str
    title: str
    price: Decimal | None = None
    image_url: str | None = None
    slug: str | None = None
    category: CategoryRef | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("item reference requires an id")

    @property
    def category_name(self) -> str:
        if self.category is None or not self.category.name:
            return DEFAULT_CATEGORY_NAME
        return self.category.name
