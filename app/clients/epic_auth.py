"""
Epic Games OAuth client.

Builds PKCE authorization URLs and talks to the Epic token endpoint for both
the initial code exchange and later refreshes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from app.core.config import EpicSettings, OAuthSettings

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = 3600
CODE_CHALLENGE_METHOD = "S256"


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint does not hand back an access token."""

    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class TokenResponseDecodeError(OAuthTokenExchangeError):
    """Raised when the token endpoint answers with something other than JSON."""


class AccountNotLinkedError(Exception):
    """Raised when no tokens are stored for an external user."""


@dataclass(slots=True, frozen=True)
class TokenGrant:
    access_token: str
    refresh_token: str
    expires_in: int


class EpicOAuthClient:
    """Build Epic authorization URLs and exchange codes or refresh tokens."""

    def __init__(
        self,
        epic_settings: EpicSettings,
        oauth_settings: OAuthSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._epic = epic_settings
        self._oauth = oauth_settings
        self._transport = transport

    @property
    def token_url(self) -> str:
        return self._epic.token_url

    def build_authorization_url(self, *, state: str, code_challenge: str) -> str:
        """Construct the Epic consent URL for a PKCE login."""
        params = {
            "client_id": self._epic.client_id,
            "redirect_uri": str(self._epic.redirect_uri),
            "response_type": "code",
            "scope": " ".join(self._oauth.scopes),
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": CODE_CHALLENGE_METHOD,
        }
        return f"{self._epic.authorize_url}?{urlencode(params)}"

    async def exchange_authorization_code(
        self, code: str, *, code_verifier: str
    ) -> TokenGrant:
        """Exchange an authorization code (plus its PKCE verifier) for tokens."""
        payload = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self._epic.client_id,
            "redirect_uri": str(self._epic.redirect_uri),
            "code_verifier": code_verifier,
        }
        return await self._request_token(payload)

    async def refresh_token(self, refresh_token: str) -> TokenGrant:
        """Trade a stored refresh token for a new token pair."""
        payload = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self._epic.client_id,
        }
        return await self._request_token(payload)

    async def _request_token(self, payload: Dict[str, str]) -> TokenGrant:
        if self._epic.client_secret:
            payload["client_secret"] = self._epic.client_secret

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(self.token_url, data=payload)

        try:
            token_payload = response.json()
        except ValueError as exc:
            logger.error(
                "Epic token endpoint returned a non-JSON body (%s): %s",
                response.status_code,
                response.text,
            )
            raise TokenResponseDecodeError(
                f"Token endpoint returned a non-JSON response ({response.status_code}).",
                payload=response.text,
            ) from exc

        access_token = (
            token_payload.get("access_token") if isinstance(token_payload, dict) else None
        )
        if not access_token or not isinstance(access_token, str):
            logger.error(
                "Epic %s grant returned no access token: %s",
                payload["grant_type"],
                token_payload,
            )
            raise OAuthTokenExchangeError(
                "Token endpoint did not return an access token.", payload=token_payload
            )

        refresh_token = token_payload.get("refresh_token") or ""
        try:
            expires_in = int(token_payload.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
        except (TypeError, ValueError):
            expires_in = None
        if expires_in is None or not isinstance(refresh_token, str):
            logger.error(
                "Epic %s grant returned a malformed token payload: %s",
                payload["grant_type"],
                token_payload,
            )
            raise OAuthTokenExchangeError(
                "Token endpoint returned a malformed token payload.", payload=token_payload
            )

        return TokenGrant(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
        )


__all__ = [
    "AccountNotLinkedError",
    "DEFAULT_TOKEN_LIFETIME",
    "EpicOAuthClient",
    "OAuthTokenExchangeError",
    "TokenGrant",
    "TokenResponseDecodeError",
]
