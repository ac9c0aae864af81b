try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64
import hashlib
import re

from app.services.pkce import (
    base64url_encode,
    build_code_challenge,
    generate_code_verifier,
    generate_state,
)

_URLSAFE = re.compile(r"^[A-Za-z0-9_-]+$")


def test_code_verifier_is_urlsafe_and_unpadded() -> None:
    verifier = generate_code_verifier()

    assert _URLSAFE.match(verifier)
    assert "=" not in verifier
    # 64 random bytes -> 86 base64 characters once padding is stripped.
    assert len(verifier) == 86


def test_code_challenge_is_sha256_of_verifier() -> None:
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

    expected = (
        base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest())
        .decode()
        .rstrip("=")
    )
    assert build_code_challenge(verifier) == expected
    # RFC 7636 appendix B example.
    assert build_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_base64url_encode_strips_padding() -> None:
    assert base64url_encode(b"\xfb\xff") == "-_8"


def test_state_is_prefixed_with_external_id_and_unique() -> None:
    states = {generate_state("123456789") for _ in range(200)}

    assert len(states) == 200
    for state in states:
        prefix, _, nonce = state.partition(":")
        assert prefix == "123456789"
        assert re.fullmatch(r"[0-9a-f]{16}", nonce)
