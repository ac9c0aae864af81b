"""
Helpers for retrieving and refreshing stored Epic OAuth tokens.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import httpx

from app.clients.epic_auth import (
    AccountNotLinkedError,
    EpicOAuthClient,
    OAuthTokenExchangeError,
)
from app.clients.token_store import TokenStore, TokenStoreError
from app.models.oauth import TokenRecord

logger = logging.getLogger(__name__)


class EpicTokenService:
    """Manages access to persisted Epic OAuth tokens."""

    REFRESH_WINDOW_SECONDS = 30

    def __init__(
        self,
        *,
        token_store: TokenStore,
        oauth_client: EpicOAuthClient,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = token_store
        self._oauth = oauth_client
        self._clock = clock

    def get_record(self, external_id: str) -> TokenRecord:
        record = self._store.get(external_id)
        if record is None:
            raise AccountNotLinkedError(f"No Epic account linked for {external_id}.")
        return record

    async def refresh(self, external_id: str) -> TokenRecord:
        """Exchange the stored refresh token and overwrite the stored triple.

        Raises ``AccountNotLinkedError`` when nothing is stored and
        ``OAuthTokenExchangeError`` when Epic withholds an access token; in
        the latter case the stored row is left untouched.
        """
        record = self.get_record(external_id)
        return await self._refresh_record(record)

    async def ensure_fresh(self, external_id: str) -> TokenRecord:
        """Return the stored record, refreshing it first if it is about to expire.

        Refresh failures are logged and the possibly stale record is returned.
        """
        record = self.get_record(external_id)
        if not record.expires_within(self.REFRESH_WINDOW_SECONDS, now=self._clock()):
            return record

        try:
            return await self._refresh_record(record)
        except (OAuthTokenExchangeError, httpx.HTTPError, TokenStoreError) as exc:
            logger.warning("Opportunistic refresh failed for %s: %s", external_id, exc)
            return record

    async def _refresh_record(self, record: TokenRecord) -> TokenRecord:
        grant = await self._oauth.refresh_token(record.refresh_token)
        refreshed = TokenRecord(
            external_id=record.external_id,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=int(self._clock()) + grant.expires_in,
        )
        updated = self._store.update_tokens(
            refreshed.external_id,
            access_token=refreshed.access_token,
            refresh_token=refreshed.refresh_token,
            expires_at=refreshed.expires_at,
        )
        if not updated:
            logger.warning(
                "Refreshed tokens for %s but no stored row was updated", refreshed.external_id
            )
            raise AccountNotLinkedError(f"No Epic account linked for {refreshed.external_id}.")
        return refreshed


__all__ = ["EpicTokenService"]
