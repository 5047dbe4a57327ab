"""Outcome of a reconciler mutation, as reported to the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class MutationStatus(StrEnum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    ROLLED_BACK = "rolled_back"
    RELOADED = "reloaded"
    AUTH_REQUIRED = "auth_required"
    ABANDONED = "abandoned"


@dataclass(frozen=True, slots=True)
class MutationResult:
    """What happened to a mutation and, for failures, a user-facing message.

    ``ROLLED_BACK`` and ``RELOADED`` are transient remote failures worth retrying;
    ``AUTH_REQUIRED`` asks the user to sign in; ``ABANDONED`` means the owning
    reconciler was closed or switched identity before the remote call finished.
    """

    status: MutationStatus
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in {MutationStatus.APPLIED, MutationStatus.UNCHANGED}

    @property
    def needs_authentication(self) -> bool:
        return self.status is MutationStatus.AUTH_REQUIRED

    @classmethod
    def applied(cls, message: str | None = None) -> MutationResult:
        return cls(MutationStatus.APPLIED, message)

    @classmethod
    def unchanged(cls) -> MutationResult:
        return cls(MutationStatus.UNCHANGED)

    @classmethod
    def rolled_back(cls, message: str) -> MutationResult:
        return cls(MutationStatus.ROLLED_BACK, message)

    @classmethod
    def reloaded(cls, message: str) -> MutationResult:
        return cls(MutationStatus.RELOADED, message)

    @classmethod
    def auth_required(cls, message: str) -> MutationResult:
        return cls(MutationStatus.AUTH_REQUIRED, message)

    @classmethod
    def abandoned(cls) -> MutationResult:
        return cls(MutationStatus.ABANDONED)
