"""In-memory registry of pending Epic logins, keyed by OAuth state."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(slots=True, frozen=True)
class PendingAuthorization:
    """A login that has been redirected to Epic but not yet called back."""

    state: str
    code_verifier: str
    external_id: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class PKCESessionCache:
    """Process-local, single-use store for PKCE verifiers.

    Sessions are removed the first time they are consumed, so a replayed
    ``state`` is indistinguishable from an unknown one. Expired entries are
    pruned whenever a new login is registered.
    """

    def __init__(
        self,
        ttl_seconds: int = 600,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, PendingAuthorization] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def register(
        self, *, state: str, code_verifier: str, external_id: str
    ) -> PendingAuthorization:
        now = self._clock()
        session = PendingAuthorization(
            state=state,
            code_verifier=code_verifier,
            external_id=external_id,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._prune_locked(now)
            self._sessions[state] = session
        return session

    def consume(self, state: str) -> Optional[PendingAuthorization]:
        """Remove and return the session for ``state`` if it is still valid."""
        with self._lock:
            session = self._sessions.pop(state, None)
        if session is None or session.is_expired(self._clock()):
            return None
        return session

    def prune(self) -> int:
        with self._lock:
            return self._prune_locked(self._clock())

    def _prune_locked(self, now: float) -> int:
        expired = [
            state for state, session in self._sessions.items() if session.is_expired(now)
        ]
        for state in expired:
            del self._sessions[state]
        return len(expired)


__all__ = ["PendingAuthorization", "PKCESessionCache"]
