"""PKCE (RFC 7636) helpers used when starting an Epic login."""

from __future__ import annotations

import base64
import hashlib
import secrets

_VERIFIER_BYTES = 64
_STATE_NONCE_BYTES = 8


def base64url_encode(raw: bytes) -> str:
    """URL-safe base64 without ``=`` padding."""
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def generate_code_verifier() -> str:
    return base64url_encode(secrets.token_bytes(_VERIFIER_BYTES))


def build_code_challenge(code_verifier: str) -> str:
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64url_encode(digest)


def generate_state(external_id: str) -> str:
    """Bind the state to the requesting user and make it unguessable."""
    return f"{external_id}:{secrets.token_hex(_STATE_NONCE_BYTES)}"


__all__ = [
    "base64url_encode",
    "build_code_challenge",
    "generate_code_verifier",
    "generate_state",
]
