"""Wishlist entries and the immutable wishlist state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

    from furnisync.domain.model.catalog import ItemRef


@dataclass(frozen=True, slots=True)
class WishlistEntry:
    item: ItemRef
    created_at: datetime | None = None

    @property
    def item_id(self) -> str:
        return self.item.id


@dataclass(frozen=True, slots=True)
class WishlistState:
    """Newest-first wishlist entries, at most one per item."""

    entries: tuple[WishlistEntry, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for entry in self.entries:
            if entry.item_id in seen:
                raise ValueError(f"duplicate wishlist entry for item {entry.item_id}")
            seen.add(entry.item_id)

    def __iter__(self) -> Iterator[WishlistEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, item_id: object) -> bool:
        return any(entry.item_id == item_id for entry in self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def item_ids(self) -> tuple[str, ...]:
        return tuple(entry.item_id for entry in self.entries)

    def find(self, item_id: str) -> WishlistEntry | None:
        for entry in self.entries:
            if entry.item_id == item_id:
                return entry
        return None

    def with_entry(self, entry: WishlistEntry) -> WishlistState:
        if entry.item_id in self:
            return self
        return WishlistState((entry, *self.entries))

    def without_item(self, item_id: str) -> WishlistState:
        return WishlistState(tuple(entry for entry in self.entries if entry.item_id != item_id))


EMPTY_WISHLIST: Final[WishlistState] = WishlistState()
