"""Supabase project configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

SUPABASE_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class SupabaseConfig:
    """Holds the Supabase project URL, public key and HTTP behaviour."""

    url: str
    anon_key: str
    resilience: ResilienceConfig

    @property
    def rest_path(self) -> str:
        return "rest/v1/"

    @property
    def auth_path(self) -> str:
        return "auth/v1/"

    @classmethod
    def from_environment(cls) -> SupabaseConfig:
        return get_supabase_config()


def default_resilience(url: str) -> ResilienceConfig:
    return ResilienceConfig(
        name="supabase",
        base_url=url.rstrip("/") + "/",
        timeout_seconds=SUPABASE_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=4),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )


def get_supabase_config(*, resilience: ResilienceConfig | None = None) -> SupabaseConfig:
    values = require_env_vars(("SUPABASE_URL", "SUPABASE_ANON_KEY"))
    url = values["SUPABASE_URL"]
    return SupabaseConfig(
        url=url,
        anon_key=values["SUPABASE_ANON_KEY"],
        resilience=resilience or default_resilience(url),
    )
