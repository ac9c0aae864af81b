"""
Link an external (Discord) user to an Epic account with an OAuth PKCE login.

The flow has two halves: ``start_login`` registers a pending session and
returns the Epic consent URL; ``complete_login`` consumes that session when
Epic redirects back and stores the resulting tokens.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from app.clients.epic_auth import EpicOAuthClient
from app.clients.token_store import TokenStore
from app.models.oauth import TokenRecord
from app.services.pkce import build_code_challenge, generate_code_verifier, generate_state
from app.services.pkce_sessions import PKCESessionCache

logger = logging.getLogger(__name__)


class InvalidOAuthStateError(Exception):
    """Raised for unknown, expired or already used OAuth state values."""


class AccountLinkService:
    def __init__(
        self,
        *,
        oauth_client: EpicOAuthClient,
        session_cache: PKCESessionCache,
        token_store: TokenStore,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._oauth = oauth_client
        self._sessions = session_cache
        self._store = token_store
        self._clock = clock

    def start_login(self, external_id: str) -> str:
        """Register a PKCE session for ``external_id`` and return the Epic login URL."""
        if not external_id or not external_id.strip():
            raise ValueError("Missing external id")

        state = generate_state(external_id)
        code_verifier = generate_code_verifier()
        self._sessions.register(
            state=state, code_verifier=code_verifier, external_id=external_id
        )
        logger.info("Starting Epic login for %s", external_id)
        return self._oauth.build_authorization_url(
            state=state, code_challenge=build_code_challenge(code_verifier)
        )

    async def complete_login(self, *, code: str, state: str) -> TokenRecord:
        """Consume the session for ``state`` and persist the exchanged tokens.

        The session is removed before the network exchange, so a failed
        exchange still requires the user to start over.
        """
        session = self._sessions.consume(state)
        if session is None:
            raise InvalidOAuthStateError("Invalid/expired state.")

        grant = await self._oauth.exchange_authorization_code(
            code, code_verifier=session.code_verifier
        )
        record = TokenRecord(
            external_id=session.external_id,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=int(self._clock()) + grant.expires_in,
        )
        self._store.save(record)
        logger.info("Linked Epic account for %s", session.external_id)
        return record


__all__ = ["AccountLinkService", "InvalidOAuthStateError"]
