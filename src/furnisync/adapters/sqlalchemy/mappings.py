"""SQLAlchemy table metadata mirroring the storefront's Supabase schema."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

category_table = Table(
    "categories",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("slug", String, nullable=False, unique=True),
)

product_table = Table(
    "products",
    metadata,
    Column("id", String, primary_key=True),
    Column("title", String, nullable=False),
    Column("slug", String, nullable=True),
    Column("price", Numeric(12, 2), nullable=True),
    Column("image_url", String, nullable=True),
    Column("category_id", String, ForeignKey("categories.id"), nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
)

cart_item_table = Table(
    "cart_items",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("user_id", String, nullable=False, index=True),
    Column(
        "product_id",
        String,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("quantity", Integer, nullable=True, default=1),
    Column("created_at", UTCDateTime, nullable=False, default=_utcnow),
    UniqueConstraint("user_id", "product_id"),
)

wishlist_table = Table(
    "wishlist",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("user_id", String, nullable=False, index=True),
    Column(
        "product_id",
        String,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("created_at", UTCDateTime, nullable=False, default=_utcnow),
    UniqueConstraint("user_id", "product_id"),
)
