"""Authentication providers guarding the payroll store."""
from __future__ import annotations

import logging
import threading
from typing import Protocol

from backend.core.errors import AuthError
from backend.infrastructure import GoogleOAuthClient, OAuthToken

logger = logging.getLogger(__name__)


class AuthProvider(Protocol):
    """Contract shared by the demo and Google OAuth providers."""

    demo: bool
    requires_code: bool
    success_redirect: str

    def is_authenticated(self) -> bool: ...

    def authorization_url(self) -> str: ...

    def complete(self, code: str | None) -> None: ...

    def access_token(self) -> str: ...

    def close(self) -> None: ...


class DemoAuthProvider:
    """Always-authenticated provider for the in-memory demo."""

    demo = True
    requires_code = False
    success_redirect = "/#step1"

    def is_authenticated(self) -> bool:
        return True

    def authorization_url(self) -> str:
        return "/"

    def complete(self, code: str | None) -> None:
        return None

    def access_token(self) -> str:
        return ""

    def close(self) -> None:
        return None


class GoogleAuthProvider:
    """Holds the OAuth token obtained through the Google consent flow."""

    demo = False
    requires_code = True
    success_redirect = "/?authenticated=true"

    def __init__(self, oauth: GoogleOAuthClient) -> None:
        self._oauth = oauth
        self._token: OAuthToken | None = None
        self._lock = threading.Lock()

    def is_authenticated(self) -> bool:
        return self._token is not None

    def authorization_url(self) -> str:
        return self._oauth.authorization_url()

    def complete(self, code: str | None) -> None:
        if not code:
            raise AuthError("No authorization code received")
        token = self._oauth.exchange_code(code)
        with self._lock:
            self._token = token
        logger.info("Google OAuth tokens received")

    def access_token(self) -> str:
        with self._lock:
            token = self._token
            if token is None:
                raise AuthError("Not authenticated with Google Sheets")
            if token.expired():
                logger.info("Refreshing expired Google access token")
                token = self._oauth.refresh(token)
                self._token = token
            return token.access_token

    def close(self) -> None:
        self._oauth.close()
