from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from furnisync.adapters.http_resilience import ResilientClient
from furnisync.config import ResilienceConfig, RetryPolicy, SupabaseConfig

if TYPE_CHECKING:
    from collections.abc import Callable



@pytest.fixture
def supabase_config() -> SupabaseConfig:
    return SupabaseConfig(
        url="https://demo.supabase.co",
        anon_key="anon-key",
        resilience=ResilienceConfig(
            name="supabase-test",
            base_url="https://demo.supabase.co/",
            retry=RetryPolicy(total=0),
        ),
    )


@pytest.fixture
def http_factory(
    supabase_config: SupabaseConfig,
) -> Callable[[Callable[[httpx.Request], httpx.Response]], ResilientClient]:
    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> ResilientClient:
        return ResilientClient(supabase_config.resilience, transport=httpx.MockTransport(handler))

    return factory
