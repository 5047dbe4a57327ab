"""Errors raised across the synchronization core and its adapters."""

from __future__ import annotations


class FurnisyncError(Exception):
    """Base class for storefront synchronization errors."""


class StoreError(FurnisyncError):
    """A remote cart or wishlist store could not complete an operation.

    Treated as transient by the reconcilers: they roll back or reload local state
    and report the failure, they never retry on their own.
    """

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class AuthenticationError(FurnisyncError):
    """The authentication provider rejected or failed a session operation."""
