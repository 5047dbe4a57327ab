"""Translate PostgREST rows into domain snapshots."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING

from furnisync.domain.model import CategoryRef, ItemRef
from furnisync.domain.ports.persistence import StoredCartLine, StoredWishlistEntry

from .schema import CartItemRow, ProductPayload, WishlistRow

if TYPE_CHECKING:
    from collections.abc import Iterable


log = getLogger(__name__)

# embedded resource used by both tables; ``category`` is an alias of ``categories``
PRODUCT_COLUMNS = "id,title,slug,price,base_price,image_url,category:categories(name,slug)"
CART_SELECT = f"product_id,quantity,products({PRODUCT_COLUMNS})"
WISHLIST_SELECT = f"product_id,created_at,product:products({PRODUCT_COLUMNS})"


def parse_item_ref(product: ProductPayload) -> ItemRef:
    category = (
        CategoryRef(name=product.category.name, slug=product.category.slug)
        if product.category is not None
        else None
    )
    return ItemRef(
        id=product.id,
        title=product.title,
        price=product.effective_price,
        image_url=product.image_url,
        slug=product.slug,
        category=category,
    )


def _ensure_row[TRow: (CartItemRow, WishlistRow)](
    row: TRow | Mapping[str, object], model: type[TRow]
) -> TRow:
    if isinstance(row, model):
        return row
    return model.model_validate(row)


def parse_cart_rows(rows: Iterable[CartItemRow | Mapping[str, object]]) -> list[StoredCartLine]:
    lines: list[StoredCartLine] = []
    for raw in rows:
        row = _ensure_row(raw, CartItemRow)
        if row.product is None:
            log.warning("Cart row for %s has no product, skipping", row.product_id)
            continue
        lines.append(
            StoredCartLine(
                item_id=row.product_id,
                # a null quantity column means the default of one
                quantity=row.quantity if row.quantity is not None else 1,
                item=parse_item_ref(row.product),
            )
        )
    return lines


def parse_wishlist_rows(
    rows: Iterable[WishlistRow | Mapping[str, object]],
) -> list[StoredWishlistEntry]:
    entries: list[StoredWishlistEntry] = []
    for raw in rows:
        row = _ensure_row(raw, WishlistRow)
        if row.product is None:
            log.warning("Wishlist row for %s has no product, skipping", row.product_id)
            continue
        entries.append(
            StoredWishlistEntry(
                item_id=row.product_id,
                item=parse_item_ref(row.product),
                created_at=row.created_at,
            )
        )
    return entries
