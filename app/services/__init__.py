"""Service layer exports."""

from .account_link import AccountLinkService, InvalidOAuthStateError
from .cosmetics import CatalogItem, CosmeticsService, classify_item, project_locker
from .epic_tokens import EpicTokenService
from .pkce_sessions import PendingAuthorization, PKCESessionCache
from .token_cipher import TokenCipherService

__all__ = [
    "AccountLinkService",
    "CatalogItem",
    "CosmeticsService",
    "EpicTokenService",
    "InvalidOAuthStateError",
    "PendingAuthorization",
    "PKCESessionCache",
    "TokenCipherService",
    "classify_item",
    "project_locker",
]
