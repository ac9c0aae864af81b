"""
FastAPI routes for the Epic account bridge.

Browser-facing endpoints (``/login``, ``/callback``) answer with short text or
HTML; the API endpoints answer with JSON and ``{"error": ...}`` bodies.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse

from app.clients import (
    AccountNotLinkedError,
    CatalogUnavailableError,
    OAuthTokenExchangeError,
    TokenResponseDecodeError,
    TokenStoreError,
)
from app.dependencies import (
    get_account_link_service,
    get_cosmetics_service,
    get_epic_token_service,
)
from app.schemas import ErrorResponse, Locker, RefreshResult
from app.services import (
    AccountLinkService,
    CosmeticsService,
    EpicTokenService,
    InvalidOAuthStateError,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_LINKED_PAGE = (
    "<h3>Login success</h3>"
    "<p>You can close this window and return to Discord. "
    "Your account is now linked.</p>"
)


def _error(status: HTTPStatus, error: str, details: Any = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


@router.get("/", response_class=PlainTextResponse)
async def healthcheck() -> str:
    """Liveness check."""
    return "Skinchecker bridge running"


@router.get("/login", response_class=PlainTextResponse)
async def login_without_id() -> PlainTextResponse:
    return PlainTextResponse("Missing external id", status_code=HTTPStatus.BAD_REQUEST)


@router.get("/login/{external_id}")
async def start_epic_login(
    external_id: str,
    service: Annotated[AccountLinkService, Depends(get_account_link_service)],
):
    """Redirect the user's browser to the Epic consent screen."""
    try:
        authorization_url = service.start_login(external_id)
    except ValueError:
        return PlainTextResponse("Missing external id", status_code=HTTPStatus.BAD_REQUEST)
    return RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)


@router.get("/callback")
async def handle_epic_callback(
    service: Annotated[AccountLinkService, Depends(get_account_link_service)],
    code: str | None = Query(default=None, description="Authorization code from Epic."),
    state: str | None = Query(default=None, description="State issued by /login."),
):
    """Complete the PKCE exchange and store the user's tokens."""
    if not code or not state:
        return PlainTextResponse("Missing code or state", status_code=HTTPStatus.BAD_REQUEST)

    try:
        await service.complete_login(code=code, state=state)
    except InvalidOAuthStateError:
        return PlainTextResponse(
            "Invalid/expired state. Start login again from Discord.",
            status_code=HTTPStatus.BAD_REQUEST,
        )
    except (TokenResponseDecodeError, httpx.HTTPError, TokenStoreError):
        logger.exception("Callback error")
        return PlainTextResponse("Callback error", status_code=HTTPStatus.INTERNAL_SERVER_ERROR)
    except OAuthTokenExchangeError:
        return PlainTextResponse(
            "Token exchange failed. Check server logs.",
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        )

    return HTMLResponse(_LINKED_PAGE)


@router.get(
    "/refresh/{external_id}",
    response_model=RefreshResult,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def refresh_epic_tokens(
    external_id: str,
    token_service: Annotated[EpicTokenService, Depends(get_epic_token_service)],
):
    """Exchange the stored refresh token for a new token pair."""
    try:
        record = await token_service.refresh(external_id)
    except AccountNotLinkedError:
        return _error(HTTPStatus.NOT_FOUND, "not linked")
    except TokenResponseDecodeError as exc:
        logger.warning("Refresh response for %s was not JSON: %s", external_id, exc)
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "refresh exception", str(exc))
    except OAuthTokenExchangeError as exc:
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "refresh failed", exc.payload)
    except TokenStoreError:
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "db")
    except httpx.HTTPError as exc:
        logger.warning("Refresh request for %s failed: %s", external_id, exc)
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "refresh exception", str(exc))

    return RefreshResult(ok=True, expires_at=record.expires_at)


@router.get(
    "/cosmetics/{external_id}",
    response_model=Locker,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_cosmetics(
    external_id: str,
    service: Annotated[CosmeticsService, Depends(get_cosmetics_service)],
):
    """Return the cosmetics the linked user most likely owns."""
    try:
        return await service.get_locker(external_id)
    except AccountNotLinkedError:
        return _error(HTTPStatus.NOT_FOUND, "not linked")
    except TokenStoreError:
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "db")
    except CatalogUnavailableError:
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "cosmetics api error")
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("cosmetics error: %s", exc)
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "cosmetics fetch failed", str(exc))


__all__ = ["router"]
