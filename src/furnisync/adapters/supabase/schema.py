"""Pydantic models describing Supabase (PostgREST and GoTrue) payloads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SupabaseBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CategoryPayload(SupabaseBaseModel):
    name: str
    slug: str | None = None


class ProductPayload(SupabaseBaseModel):
    id: str
    title: str
    slug: str | None = None
    price: Decimal | None = None
    base_price: Decimal | None = None
    image_url: str | None = None
    category: CategoryPayload | None = None

    _normalize_blank = field_validator("image_url", "slug", mode="before")(_blank_to_none)

    @property
    def effective_price(self) -> Decimal | None:
        return self.price if self.price is not None else self.base_price


class CartItemRow(SupabaseBaseModel):
    product_id: str
    quantity: int | None = None
    product: ProductPayload | None = Field(default=None, alias="products")


class WishlistRow(SupabaseBaseModel):
    product_id: str
    created_at: datetime | None = None
    product: ProductPayload | None = None


class PostgrestError(SupabaseBaseModel):
    message: str
    code: str | None = None
    details: str | None = None
    hint: str | None = None


class AuthUser(SupabaseBaseModel):
    id: str
    email: str | None = None


class TokenResponse(SupabaseBaseModel):
    access_token: str
    refresh_token: str
    expires_in: int | None = None
    token_type: str = "bearer"
    user: AuthUser


class AuthErrorResponse(SupabaseBaseModel):
    error: str | None = None
    error_description: str | None = None
    msg: str | None = None
    message: str | None = None

    @property
    def text(self) -> str:
        return (
            self.error_description
            or self.msg
            or self.message
            or self.error
            or "authentication failed"
        )
