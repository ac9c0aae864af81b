"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Process-wide singletons (clients, the token store, the PKCE session cache)
are cached; services are rebuilt per request from those singletons so that
``app.dependency_overrides`` on any leaf reaches every route.
"""

from functools import lru_cache

from fastapi import Depends

from app.clients import (
    CosmeticsCatalogClient,
    EpicOAuthClient,
    TokenStore,
)
from app.core.config import get_settings
from app.services import (
    AccountLinkService,
    CosmeticsService,
    EpicTokenService,
    PKCESessionCache,
    TokenCipherService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_epic_oauth_client() -> EpicOAuthClient:
    """Create a singleton Epic OAuth client."""
    settings = _settings()
    return EpicOAuthClient(settings.epic, settings.oauth)


@lru_cache()
def get_catalog_client() -> CosmeticsCatalogClient:
    """Provide the public cosmetics catalog client."""
    return CosmeticsCatalogClient(_settings().catalog)


@lru_cache()
def get_token_cipher_service() -> TokenCipherService | None:
    """Provide token encryption when a secret is configured, else store plaintext."""
    secret = _settings().storage.token_encryption_secret
    if not secret:
        return None
    return TokenCipherService(secret=secret)


@lru_cache()
def get_token_store() -> TokenStore:
    """Provide the shared SQLite token store."""
    settings = _settings()
    return TokenStore(settings.storage.db_path, cipher=get_token_cipher_service())


@lru_cache()
def get_pkce_session_cache() -> PKCESessionCache:
    """Provide the process-local registry of pending logins."""
    return PKCESessionCache(ttl_seconds=_settings().oauth.state_ttl_seconds)


def get_account_link_service(
    oauth_client: EpicOAuthClient = Depends(get_epic_oauth_client),
    session_cache: PKCESessionCache = Depends(get_pkce_session_cache),
    token_store: TokenStore = Depends(get_token_store),
) -> AccountLinkService:
    """Build the login/callback service."""
    return AccountLinkService(
        oauth_client=oauth_client,
        session_cache=session_cache,
        token_store=token_store,
    )


def get_epic_token_service(
    oauth_client: EpicOAuthClient = Depends(get_epic_oauth_client),
    token_store: TokenStore = Depends(get_token_store),
) -> EpicTokenService:
    """Build the token refresh service."""
    return EpicTokenService(token_store=token_store, oauth_client=oauth_client)


def get_cosmetics_service(
    token_service: EpicTokenService = Depends(get_epic_token_service),
    catalog_client: CosmeticsCatalogClient = Depends(get_catalog_client),
) -> CosmeticsService:
    """Build the locker projection service."""
    return CosmeticsService(token_service=token_service, catalog_client=catalog_client)


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
