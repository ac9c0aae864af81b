"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_account_link_service,
    get_catalog_client,
    get_cosmetics_service,
    get_epic_oauth_client,
    get_epic_token_service,
    get_pkce_session_cache,
    get_token_cipher_service,
    get_token_store,
)

__all__ = [
    "get_account_link_service",
    "get_catalog_client",
    "get_cosmetics_service",
    "get_epic_oauth_client",
    "get_epic_token_service",
    "get_pkce_session_cache",
    "get_token_cipher_service",
    "get_token_store",
]
