"""Cart lines and the immutable cart state they live in."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterator

    from furnisync.domain.model.catalog import ItemRef


@dataclass(frozen=True, slots=True)
class CartLine:
    item: ItemRef
    quantity: int = 1

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"cart line quantity must be at least 1, got {self.quantity}")

    @property
    def item_id(self) -> str:
        return self.item.id

    def with_quantity(self, quantity: int) -> CartLine:
        return replace(self, quantity=quantity)


@dataclass(frozen=True, slots=True)
class CartState:
    """Copy-on-write collection of cart lines, at most one line per item.

    Every ``with_*``/``without_*`` call returns a new state and leaves the receiver
    untouched, so any previous state doubles as an undo snapshot.
    """

    lines: tuple[CartLine, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for line in self.lines:
            if line.item_id in seen:
                raise ValueError(f"duplicate cart line for item {line.item_id}")
            seen.add(line.item_id)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __contains__(self, item_id: object) -> bool:
        return any(line.item_id == item_id for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_ids(self) -> tuple[str, ...]:
        return tuple(line.item_id for line in self.lines)

    def find(self, item_id: str) -> CartLine | None:
        for line in self.lines:
            if line.item_id == item_id:
                return line
        return None

    def quantity_of(self, item_id: str) -> int:
        line = self.find(item_id)
        return line.quantity if line is not None else 0

    def with_item_added(self, item: ItemRef, quantity: int = 1) -> CartState:
        """Increment the existing line for ``item`` or append a new one."""

        if self.find(item.id) is None:
            return CartState((*self.lines, CartLine(item=item, quantity=quantity)))
        return CartState(
            tuple(
                line.with_quantity(line.quantity + quantity) if line.item_id == item.id else line
                for line in self.lines
            )
        )

    def with_quantity(self, item_id: str, quantity: int) -> CartState:
        if quantity <= 0:
            return self.without_item(item_id)
        return CartState(
            tuple(
                line.with_quantity(quantity) if line.item_id == item_id else line
                for line in self.lines
            )
        )

    def without_item(self, item_id: str) -> CartState:
        return CartState(tuple(line for line in self.lines if line.item_id != item_id))


EMPTY_CART: Final[CartState] = CartState()
