try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from app.clients.epic_auth import (
    EpicOAuthClient,
    OAuthTokenExchangeError,
    TokenGrant,
    TokenResponseDecodeError,
)
from app.core.config import EpicSettings, OAuthSettings

TOKEN_URL = "https://api.epicgames.dev/epic/oauth/v1/token"


def _settings(client_secret: str = "") -> EpicSettings:
    return EpicSettings(
        EPIC_CLIENT_ID="client-abc",
        EPIC_CLIENT_SECRET=client_secret,
        REDIRECT_URI="https://bridge.example.com/callback",
    )


class RecordingTransport(httpx.AsyncBaseTransport):
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        return self.response

    def form(self, index: int = -1) -> dict[str, str]:
        body = parse_qs(self.requests[index].content.decode())
        return {key: values[0] for key, values in body.items()}


def test_authorization_url_carries_pkce_parameters() -> None:
    client = EpicOAuthClient(_settings(), OAuthSettings())

    url = client.build_authorization_url(state="u1:deadbeef", code_challenge="challenge")

    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
        "https://www.epicgames.com/id/authorize"
    )
    query = {key: values[0] for key, values in parse_qs(parts.query).items()}
    assert query == {
        "client_id": "client-abc",
        "redirect_uri": "https://bridge.example.com/callback",
        "response_type": "code",
        "scope": "basic_profile openid",
        "state": "u1:deadbeef",
        "code_challenge": "challenge",
        "code_challenge_method": "S256",
    }


def test_scopes_accept_comma_or_space_separated_strings() -> None:
    assert OAuthSettings(OAUTH_SCOPES="basic_profile, openid").scopes == (
        "basic_profile",
        "openid",
    )
    assert OAuthSettings(OAUTH_SCOPES="openid friends_list").scopes == (
        "openid",
        "friends_list",
    )


@pytest.mark.anyio
async def test_exchange_authorization_code_posts_verifier() -> None:
    transport = RecordingTransport(
        httpx.Response(
            200,
            json={"access_token": "at", "refresh_token": "rt", "expires_in": 7200},
        )
    )
    client = EpicOAuthClient(_settings(), OAuthSettings(), transport=transport)

    grant = await client.exchange_authorization_code("the-code", code_verifier="verifier")

    assert grant == TokenGrant(access_token="at", refresh_token="rt", expires_in=7200)
    request = transport.requests[-1]
    assert request.method == "POST"
    assert str(request.url) == TOKEN_URL
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert transport.form() == {
        "grant_type": "authorization_code",
        "code": "the-code",
        "client_id": "client-abc",
        "redirect_uri": "https://bridge.example.com/callback",
        "code_verifier": "verifier",
    }


@pytest.mark.anyio
async def test_client_secret_is_sent_when_configured() -> None:
    transport = RecordingTransport(httpx.Response(200, json={"access_token": "at"}))
    client = EpicOAuthClient(
        _settings(client_secret="shh"), OAuthSettings(), transport=transport
    )

    await client.refresh_token("old-refresh")

    assert transport.form() == {
        "grant_type": "refresh_token",
        "refresh_token": "old-refresh",
        "client_id": "client-abc",
        "client_secret": "shh",
    }


@pytest.mark.anyio
async def test_missing_lifetime_defaults_to_one_hour() -> None:
    transport = RecordingTransport(httpx.Response(200, json={"access_token": "at"}))
    client = EpicOAuthClient(_settings(), OAuthSettings(), transport=transport)

    grant = await client.refresh_token("old-refresh")

    assert grant.expires_in == 3600
    assert grant.refresh_token == ""


@pytest.mark.anyio
async def test_response_without_access_token_raises_with_payload() -> None:
    error_body = {"errorCode": "errors.com.epicgames.oauth.invalid_grant"}
    transport = RecordingTransport(httpx.Response(400, json=error_body))
    client = EpicOAuthClient(_settings(), OAuthSettings(), transport=transport)

    with pytest.raises(OAuthTokenExchangeError) as excinfo:
        await client.exchange_authorization_code("bad-code", code_verifier="v")

    assert excinfo.value.payload == error_body


@pytest.mark.anyio
async def test_non_json_response_raises_decode_error() -> None:
    transport = RecordingTransport(httpx.Response(502, text="<html>Bad gateway</html>"))
    client = EpicOAuthClient(_settings(), OAuthSettings(), transport=transport)

    with pytest.raises(TokenResponseDecodeError) as excinfo:
        await client.refresh_token("r")

    assert "Bad gateway" in excinfo.value.payload
    assert isinstance(excinfo.value, OAuthTokenExchangeError)


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [
        {"access_token": "new", "expires_in": "soon"},
        {"access_token": "new", "expires_in": {"seconds": 60}},
        {"access_token": 12345, "expires_in": 3600},
        {"access_token": ["new"]},
        {"access_token": "new", "refresh_token": {"value": "rt"}},
        ["access_token", "new"],
    ],
)
async def test_malformed_token_payload_raises_exchange_error(body) -> None:
    transport = RecordingTransport(httpx.Response(200, json=body))
    client = EpicOAuthClient(_settings(), OAuthSettings(), transport=transport)

    with pytest.raises(OAuthTokenExchangeError) as excinfo:
        await client.refresh_token("r")

    assert not isinstance(excinfo.value, TokenResponseDecodeError)
    assert excinfo.value.payload == body


@pytest.mark.anyio
async def test_numeric_string_lifetime_is_accepted() -> None:
    transport = RecordingTransport(
        httpx.Response(200, json={"access_token": "at", "expires_in": "7200"})
    )
    client = EpicOAuthClient(_settings(), OAuthSettings(), transport=transport)

    grant = await client.refresh_token("r")

    assert grant.expires_in == 7200
