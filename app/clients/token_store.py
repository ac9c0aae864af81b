"""SQLite-backed credential store, one row per linked external user."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Protocol

from app.models.oauth import TokenRecord

logger = logging.getLogger(__name__)


class _Cipher(Protocol):
    def encrypt(self, plaintext: str) -> str: ...

    def decrypt(self, ciphertext: str) -> str: ...


class TokenStoreError(Exception):
    """Raised when the token database cannot be read or written."""


class TokenStore:
    """Key-value table mapping ``external_id`` to an Epic token triple.

    Writes are last-write-wins; each operation is a single statement so a
    row is never observed half-updated.
    """

    def __init__(self, db_path: str, *, cipher: Optional[_Cipher] = None) -> None:
        self._db_path = Path(db_path)
        self._cipher = cipher
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _encode(self, value: str) -> str:
        return self._cipher.encrypt(value) if self._cipher else value

    def _decode(self, value: str) -> str:
        return self._cipher.decrypt(value) if self._cipher else value

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tokens (
                    external_id TEXT PRIMARY KEY,
                    access_token TEXT,
                    refresh_token TEXT,
                    expires_at INTEGER
                )
                """
            )

    def save(self, record: TokenRecord) -> None:
        """Insert or fully replace the row for ``record.external_id``."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO tokens (external_id, access_token, refresh_token, expires_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(external_id) DO UPDATE SET
                        access_token = excluded.access_token,
                        refresh_token = excluded.refresh_token,
                        expires_at = excluded.expires_at
                    """,
                    (
                        record.external_id,
                        self._encode(record.access_token),
                        self._encode(record.refresh_token),
                        record.expires_at,
                    ),
                )
        except sqlite3.Error as exc:
            logger.error("Failed to save tokens for %s: %s", record.external_id, exc)
            raise TokenStoreError(str(exc)) from exc

    def update_tokens(
        self,
        external_id: str,
        *,
        access_token: str,
        refresh_token: str,
        expires_at: int,
    ) -> bool:
        """Overwrite the token fields of an existing row.

        Returns ``False`` when no row exists for ``external_id``.
        """
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    UPDATE tokens
                    SET access_token = ?, refresh_token = ?, expires_at = ?
                    WHERE external_id = ?
                    """,
                    (
                        self._encode(access_token),
                        self._encode(refresh_token),
                        expires_at,
                        external_id,
                    ),
                )
        except sqlite3.Error as exc:
            logger.error("Failed to update tokens for %s: %s", external_id, exc)
            raise TokenStoreError(str(exc)) from exc
        return cursor.rowcount > 0

    def get(self, external_id: str) -> Optional[TokenRecord]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    """
                    SELECT external_id, access_token, refresh_token, expires_at
                    FROM tokens WHERE external_id = ?
                    """,
                    (external_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            logger.error("Failed to read tokens for %s: %s", external_id, exc)
            raise TokenStoreError(str(exc)) from exc
        if not row:
            return None
        try:
            access_token = self._decode(row["access_token"] or "")
            refresh_token = self._decode(row["refresh_token"] or "")
        except ValueError as exc:
            logger.error("Stored tokens for %s could not be decrypted", external_id)
            raise TokenStoreError(str(exc)) from exc
        return TokenRecord(
            external_id=row["external_id"],
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=row["expires_at"] or 0,
        )


__all__ = ["TokenStore", "TokenStoreError"]
