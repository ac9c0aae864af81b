"""Client for the public Fortnite cosmetics catalog (fortnite-api.com)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import CatalogSettings

logger = logging.getLogger(__name__)


class CatalogUnavailableError(Exception):
    """Raised when the catalog response carries no usable item list."""


class CosmeticsCatalogClient:
    """Fetch the full battle royale cosmetics listing in one request."""

    def __init__(
        self,
        settings: CatalogSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def fetch_items(self) -> List[Dict[str, Any]]:
        """Return the raw catalog items, in the order the API lists them."""
        headers = {}
        if self._settings.api_key:
            headers["Authorization"] = self._settings.api_key

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.get(self._settings.url, headers=headers)

        payload = response.json()
        items = payload.get("data") if isinstance(payload, dict) else None
        if not items or not isinstance(items, list):
            logger.error(
                "Cosmetics catalog returned no data (status %s)", response.status_code
            )
            raise CatalogUnavailableError("Cosmetics catalog returned no data.")
        return items


__all__ = ["CatalogUnavailableError", "CosmeticsCatalogClient"]
