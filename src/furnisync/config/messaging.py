"""Outbound messaging (WhatsApp inquiry) settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from .errors import ConfigurationError

DEFAULT_WHATSAPP_NUMBER: Final[str] = "919824044585"


@dataclass(frozen=True, slots=True)
class MessagingConfig:
    phone_number: str = DEFAULT_WHATSAPP_NUMBER

    def __post_init__(self) -> None:
        if not self.phone_number.isdigit():
            raise ConfigurationError(
                f"WhatsApp number must contain digits only, got {self.phone_number!r}"
            )


def get_messaging_config() -> MessagingConfig:
    number = os.getenv("FURNISYNC_WHATSAPP_NUMBER", "").strip()
    return MessagingConfig(phone_number=number or DEFAULT_WHATSAPP_NUMBER)
