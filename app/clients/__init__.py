"""Expose constructed client wrappers."""

from .cosmetics_catalog import CatalogUnavailableError, CosmeticsCatalogClient
from .epic_auth import (
    AccountNotLinkedError,
    EpicOAuthClient,
    OAuthTokenExchangeError,
    TokenGrant,
    TokenResponseDecodeError,
)
from .token_store import TokenStore, TokenStoreError

__all__ = [
    "AccountNotLinkedError",
    "CatalogUnavailableError",
    "CosmeticsCatalogClient",
    "EpicOAuthClient",
    "OAuthTokenExchangeError",
    "TokenGrant",
    "TokenResponseDecodeError",
    "TokenStore",
    "TokenStoreError",
]
