"""
Application configuration models and helpers.

Settings are read once from the environment (and an optional ``.env`` file)
and handed to the API layer through FastAPI dependencies.
"""

from functools import lru_cache
from typing import Annotated, Optional

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

load_dotenv()


class EpicSettings(BaseSettings):
    """Credentials for the Epic Games OAuth application."""

    client_id: str = Field(..., validation_alias="EPIC_CLIENT_ID")
    client_secret: str = Field(
        "",
        validation_alias="EPIC_CLIENT_SECRET",
        description="Only sent to the token endpoint when non-empty.",
    )
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="REDIRECT_URI")
    authorize_url: str = Field(
        "https://www.epicgames.com/id/authorize", validation_alias="EPIC_AUTHORIZE_URL"
    )
    token_url: str = Field(
        "https://api.epicgames.dev/epic/oauth/v1/token",
        validation_alias="EPIC_TOKEN_URL",
    )


class OAuthSettings(BaseSettings):
    """PKCE flow configuration."""

    state_ttl_seconds: int = Field(600, validation_alias="OAUTH_STATE_TTL")
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("basic_profile", "openid"), validation_alias="OAUTH_SCOPES"
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support scopes given as a space or comma separated string."""
        if isinstance(value, (tuple, list)):
            return tuple(value)
        return tuple(scope for scope in value.replace(",", " ").split() if scope)


class CatalogSettings(BaseSettings):
    """Public cosmetics catalog (fortnite-api.com)."""

    url: str = Field(
        "https://fortnite-api.com/v2/cosmetics/br", validation_alias="COSMETIC_API_URL"
    )
    api_key: Optional[str] = Field(None, validation_alias="COSMETIC_API_KEY")


class StorageSettings(BaseSettings):
    """Location and protection of the token database."""

    db_path: str = Field("./tokens.db", validation_alias="DB_PATH")
    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description="When set, stored tokens are encrypted with a derived Fernet key.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the bridge service."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(3000, validation_alias="PORT")
    epic: EpicSettings = Field(default_factory=EpicSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "CatalogSettings",
    "EpicSettings",
    "OAuthSettings",
    "StorageSettings",
    "get_settings",
]
