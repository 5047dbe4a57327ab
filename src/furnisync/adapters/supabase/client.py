"""Thin PostgREST client for the Supabase data API."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx

from furnisync.adapters.http_resilience import ResilientClient
from furnisync.domain.errors import StoreError

from .schema import PostgrestError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from furnisync.config.supabase import SupabaseConfig

TokenSource = Callable[[], str | None]

log = getLogger(__name__)


def eq(value: str) -> str:
    """PostgREST equality filter operand."""

    return f"eq.{value}"


def _no_token() -> str | None:
    return None


def _describe_error(response: httpx.Response) -> str:
    try:
        error = PostgrestError.model_validate(response.json())
    except ValueError:
        return f"HTTP {response.status_code} from {response.request.url.path}"
    code = f" ({error.code})" if error.code else ""
    return f"HTTP {response.status_code}{code}: {error.message}"


class SupabaseRestClient:
    """Issues table reads and writes against ``/rest/v1``.

    Requests are authorised with the signed-in user's access token when the token
    source provides one, otherwise with the anonymous key, so row level security
    applies exactly as it would in the browser. Every failure surfaces as
    :class:`StoreError`.
    """

    def __init__(
        self,
        config: SupabaseConfig,
        *,
        http: ResilientClient | None = None,
        token_source: TokenSource = _no_token,
    ) -> None:
        self.config = config
        self._http = http or ResilientClient(config.resilience)
        self._token_source = token_source

    async def aclose(self) -> None:
        await self._http.aclose()

    def headers(self, *, prefer: str | None = None) -> dict[str, str]:
        token = self._token_source() or self.config.anon_key
        headers = {"apikey": self.config.anon_key, "Authorization": f"Bearer {token}"}
        if prefer is not None:
            headers["Prefer"] = prefer
        return headers

    async def select(
        self,
        table: str,
        *,
        columns: str,
        filters: Mapping[str, str],
        order: str | None = None,
        operation: str,
    ) -> list[Mapping[str, object]]:
        params = {"select": columns, **filters}
        if order is not None:
            params["order"] = order
        response = await self._send("GET", table, params=params, operation=operation)
        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreError(f"{operation}: response is not JSON", operation=operation) from exc
        if not isinstance(payload, list):
            raise StoreError(f"{operation}: expected a list of rows", operation=operation)
        return cast("list[Mapping[str, object]]", payload)

    async def upsert(
        self,
        table: str,
        rows: Sequence[Mapping[str, object]],
        *,
        on_conflict: str,
        ignore_duplicates: bool = False,
        operation: str,
    ) -> None:
        resolution = "ignore-duplicates" if ignore_duplicates else "merge-duplicates"
        await self._send(
            "POST",
            table,
            params={"on_conflict": on_conflict},
            json=list(rows),
            prefer=f"resolution={resolution},return=minimal",
            operation=operation,
        )

    async def delete(self, table: str, *, filters: Mapping[str, str], operation: str) -> None:
        if not filters:
            raise ValueError("refusing to delete without filters")
        await self._send(
            "DELETE",
            table,
            params=dict(filters),
            prefer="return=minimal",
            operation=operation,
        )

    async def _send(
        self,
        method: str,
        table: str,
        *,
        params: Mapping[str, str],
        operation: str,
        json: object = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        url = f"{self.config.rest_path}{table}"
        log.debug("%s %s (%s)", method, url, operation)
        try:
            response = await self._http.request(
                method,
                url,
                params=dict(params),
                json=json,
                headers=self.headers(prefer=prefer),
            )
        except httpx.HTTPError as exc:
            raise StoreError(f"{operation}: {exc}", operation=operation) from exc
        if response.is_error:
            raise StoreError(f"{operation}: {_describe_error(response)}", operation=operation)
        return response
