"""Errors raised while reading storefront settings from the environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """A setting is present but unusable, e.g. a malformed messaging number."""


class MissingConfigurationError(ConfigurationError):
    """Required environment variables are unset or blank.

    ``names`` lists every missing variable, sorted, so one run reports them all.
    """

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")
