"""Who the storefront is acting for."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class Identity:
    """Anonymous visitor (no user id) or an authenticated user."""

    user_id: str | None = None

    def __post_init__(self) -> None:
        if self.user_id is not None and not self.user_id.strip():
            raise ValueError("authenticated identity requires a non-blank user id")

    @classmethod
    def authenticated(cls, user_id: str) -> Identity:
        return cls(user_id=user_id)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user_id(self) -> str:
        if self.user_id is None:
            raise ValueError("operation requires an authenticated identity")
        return self.user_id

    def __str__(self) -> str:
        return self.user_id if self.user_id is not None else "<anonymous>"


ANONYMOUS: Final[Identity] = Identity()
