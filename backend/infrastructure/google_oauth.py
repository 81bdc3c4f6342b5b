"""Google OAuth 2.0 authorization-code flow over httpx."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence
from urllib.parse import urlencode

import httpx

from backend.core.errors import UpstreamError

AUTH_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"

EXPIRY_SKEW = timedelta(seconds=60)


class OAuthError(UpstreamError):
    """Raised when the token endpoint rejects a request or cannot be reached."""


@dataclass(slots=True)
class OAuthToken:
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None
    token_type: str = "Bearer"

    def expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now + EXPIRY_SKEW >= self.expires_at


class GoogleOAuthClient:
    """Builds consent URLs and exchanges codes for tokens."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_url: str,
        *,
        scopes: Sequence[str] = (SHEETS_SCOPE,),
        auth_endpoint: str = AUTH_ENDPOINT,
        token_endpoint: str = TOKEN_ENDPOINT,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_url = redirect_url
        self._scopes = list(scopes)
        self._auth_endpoint = auth_endpoint
        self._token_endpoint = token_endpoint
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _ensure_configured(self) -> None:
        if not self.configured:
            raise OAuthError(
                "Google OAuth credentials not configured. "
                "Please set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET environment variables."
            )

    @staticmethod
    def _parse_token(payload: dict[str, Any], *, fallback_refresh: str | None = None) -> OAuthToken:
        access_token = payload.get("access_token")
        if not access_token:
            raise OAuthError("Token response did not include an access token")

        expires_at: datetime | None = None
        expires_in = payload.get("expires_in")
        if expires_in is not None:
            try:
                expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
            except (TypeError, ValueError):
                expires_at = None

        return OAuthToken(
            access_token=str(access_token),
            refresh_token=payload.get("refresh_token") or fallback_refresh,
            expires_at=expires_at,
            token_type=str(payload.get("token_type") or "Bearer"),
        )

    def _request_token(self, data: dict[str, str]) -> dict[str, Any]:
        try:
            response = self._client.post(self._token_endpoint, data=data)
        except httpx.HTTPError as exc:
            raise OAuthError(f"Token endpoint unreachable: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            message = payload.get("error_description") or payload.get("error") or response.reason_phrase
            raise OAuthError(str(message))
        return payload

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def authorization_url(self, state: str | None = None) -> str:
        self._ensure_configured()
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_url,
            "response_type": "code",
            "scope": " ".join(self._scopes),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{self._auth_endpoint}?{urlencode(params)}"

    def exchange_code(self, code: str) -> OAuthToken:
        self._ensure_configured()
        payload = self._request_token(
            {
                "code": code,
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "redirect_uri": self._redirect_url,
                "grant_type": "authorization_code",
            }
        )
        return self._parse_token(payload)

    def refresh(self, token: OAuthToken) -> OAuthToken:
        if not token.refresh_token:
            raise OAuthError("Access token expired and no refresh token is available")
        self._ensure_configured()
        payload = self._request_token(
            {
                "refresh_token": token.refresh_token,
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "grant_type": "refresh_token",
            }
        )
        return self._parse_token(payload, fallback_refresh=token.refresh_token)

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


__all__ = ["GoogleOAuthClient", "OAuthError", "OAuthToken", "SHEETS_SCOPE"]
