"""Supabase GoTrue session provider."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from furnisync.adapters.http_resilience import ResilientClient
from furnisync.domain.errors import AuthenticationError
from furnisync.domain.listeners import Listeners
from furnisync.domain.model import ANONYMOUS, Identity

from .schema import AuthErrorResponse, TokenResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from furnisync.config.supabase import SupabaseConfig
    from furnisync.domain.listeners import Unsubscribe
    from furnisync.domain.ports.session import IdentityCallback


log = getLogger(__name__)

# refresh a little before the server-side expiry
_EXPIRY_MARGIN = timedelta(seconds=30)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class AuthSession:
    access_token: str
    refresh_token: str
    user_id: str
    email: str | None = None
    expires_at: datetime | None = None

    @property
    def identity(self) -> Identity:
        return Identity.authenticated(self.user_id)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at - _EXPIRY_MARGIN


class SupabaseSessionProvider:
    """Password sign-in, refresh and sign-out against ``/auth/v1``.

    Listeners registered through :meth:`on_identity_change` are called on every
    sign in, token refresh and sign out. :attr:`access_token` is meant to be handed
    to :class:`SupabaseRestClient` as its token source.
    """

    def __init__(
        self,
        config: SupabaseConfig,
        *,
        http: ResilientClient | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self._http = http or ResilientClient(config.resilience)
        self._clock = clock
        self._session: AuthSession | None = None
        self._listeners: Listeners[Identity] = Listeners()

    @property
    def session(self) -> AuthSession | None:
        return self._session

    def access_token(self) -> str | None:
        return self._session.access_token if self._session is not None else None

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_current_identity(self) -> Identity:
        session = self._session
        if session is None:
            return ANONYMOUS
        if session.is_expired(self._clock()):
            await self.refresh_session()
        return self._session.identity if self._session is not None else ANONYMOUS

    def on_identity_change(self, callback: IdentityCallback) -> Unsubscribe:
        return self._listeners.subscribe(callback)

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        session = await self._token_request(
            "password", {"email": email, "password": password}
        )
        self._set_session(session)
        log.info("Signed in as %s", session.email or session.user_id)
        return session.identity

    async def refresh_session(self) -> Identity:
        current = self._session
        if current is None:
            raise AuthenticationError("No session to refresh")
        try:
            session = await self._token_request(
                "refresh_token", {"refresh_token": current.refresh_token}
            )
        except AuthenticationError:
            self._set_session(None)
            raise
        self._set_session(session)
        return session.identity

    async def sign_out(self) -> None:
        """End the session locally; a failed server-side logout is only logged."""

        current = self._session
        if current is None:
            return
        try:
            response = await self._http.post(
                f"{self.config.auth_path}logout",
                headers=self._headers(current.access_token),
            )
        except httpx.HTTPError:
            log.warning("Server-side logout failed", exc_info=True)
        else:
            if response.is_error:
                log.warning("Server-side logout returned HTTP %s", response.status_code)
        self._set_session(None)

    async def _token_request(self, grant_type: str, payload: dict[str, str]) -> AuthSession:
        try:
            response = await self._http.post(
                f"{self.config.auth_path}token",
                params={"grant_type": grant_type},
                json=payload,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"Token request failed: {exc}") from exc

        if response.is_error:
            raise AuthenticationError(_describe_auth_error(response))
        try:
            token = TokenResponse.model_validate(response.json())
        except ValueError as exc:
            raise AuthenticationError("Malformed token response") from exc

        expires_at = (
            self._clock() + timedelta(seconds=token.expires_in)
            if token.expires_in is not None
            else None
        )
        return AuthSession(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            user_id=token.user.id,
            email=token.user.email,
            expires_at=expires_at,
        )

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self.config.anon_key}
        if access_token is not None:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _set_session(self, session: AuthSession | None) -> None:
        self._session = session
        self._listeners.publish(session.identity if session is not None else ANONYMOUS)


def _describe_auth_error(response: httpx.Response) -> str:
    try:
        error = AuthErrorResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        return f"HTTP {response.status_code}"
    return f"HTTP {response.status_code}: {error.text}"
