"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .messaging import DEFAULT_WHATSAPP_NUMBER, MessagingConfig, get_messaging_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)
from .supabase import SupabaseConfig, get_supabase_config

__all__ = [
    "DEFAULT_WHATSAPP_NUMBER",
    "ConfigurationError",
    "DatabaseConfig",
    "MessagingConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SupabaseConfig",
    "configure_logging",
    "get_database_config",
    "get_database_uri",
    "get_messaging_config",
    "get_storage_config",
    "get_supabase_config",
    "require_env_var",
    "require_env_vars",
]
