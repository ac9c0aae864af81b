"""
Heuristic "ownership" view over the public cosmetics catalog.

Epic's OAuth scopes do not expose a player's locker, so ownership is guessed
from public catalog metadata: items sold through the shop, battle pass,
promotions or events are reported as likely owned. Nothing here is verified
against the player's account.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set

from app.clients.cosmetics_catalog import CosmeticsCatalogClient
from app.schemas.cosmetics import Locker, LockerCounts, LockerItem
from app.services.epic_tokens import EpicTokenService

logger = logging.getLogger(__name__)

SKINS = "skins"
PICKAXES = "pickaxes"
EMOTES = "emotes"
EXCLUSIVES = "exclusives"

TYPED_BUCKET_LIMIT = 200

OWNERSHIP_TAG_KEYWORDS = ("battlepass", "twitchprime", "itemshop", "founder", "event")
EXCLUSIVE_MARKER = "exclusive"

_TYPE_BUCKETS = {
    "outfit": SKINS,
    "pickaxe": PICKAXES,
    "emote": EMOTES,
}


def _text(value: Any, key: str) -> str:
    """Read a field that the catalog sends either flat or as ``{key: ...}``."""
    if isinstance(value, dict):
        value = value.get(key)
    return value if isinstance(value, str) else ""


@dataclass(slots=True, frozen=True)
class CatalogItem:
    """The subset of a catalog entry the ownership heuristic looks at."""

    id: str
    name: str
    type: str = ""
    rarity: str = "Unknown"
    image: Optional[str] = None
    introduction: str = ""
    tags: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CatalogItem":
        item_id = str(payload.get("id") or "")
        images = payload.get("images") or {}
        image = None
        if isinstance(images, dict):
            image = images.get("icon") or images.get("featured")
        tags = frozenset(
            tag
            for tag in (_text(raw, "value") for raw in payload.get("tags") or [])
            if tag
        )
        return cls(
            id=item_id,
            name=payload.get("name") or item_id,
            type=_text(payload.get("type"), "value"),
            rarity=_text(payload.get("rarity"), "displayValue") or "Unknown",
            image=image,
            introduction=_text(payload.get("introduction"), "backendValue"),
            tags=tags,
        )


def classify_item(item: CatalogItem) -> Set[str]:
    """Return the locker buckets ``item`` falls into (possibly none)."""
    tag_text = " ".join(sorted(item.tags)).lower()
    intro_text = item.introduction.lower()

    is_exclusive = EXCLUSIVE_MARKER in intro_text or EXCLUSIVE_MARKER in tag_text
    likely_owned = is_exclusive or any(
        keyword in tag_text for keyword in OWNERSHIP_TAG_KEYWORDS
    )

    buckets: Set[str] = set()
    typed_bucket = _TYPE_BUCKETS.get(item.type)
    if likely_owned and typed_bucket:
        buckets.add(typed_bucket)
    if is_exclusive:
        buckets.add(EXCLUSIVES)
    return buckets


def project_locker(
    items: Iterable[CatalogItem], *, limit: int = TYPED_BUCKET_LIMIT
) -> Locker:
    """Bucket items in catalog order; typed buckets are capped, counts are not."""
    buckets: Dict[str, List[LockerItem]] = {
        SKINS: [],
        PICKAXES: [],
        EMOTES: [],
        EXCLUSIVES: [],
    }
    for item in items:
        matched = classify_item(item)
        if not matched:
            continue
        entry = LockerItem(name=item.name, image=item.image, rarity=item.rarity, id=item.id)
        for bucket in matched:
            buckets[bucket].append(entry)

    return Locker(
        skins=buckets[SKINS][:limit],
        pickaxes=buckets[PICKAXES][:limit],
        emotes=buckets[EMOTES][:limit],
        exclusives=buckets[EXCLUSIVES],
        counts=LockerCounts(**{name: len(entries) for name, entries in buckets.items()}),
    )


class CosmeticsService:
    """Build a user's locker view from the live catalog."""

    def __init__(
        self,
        *,
        token_service: EpicTokenService,
        catalog_client: CosmeticsCatalogClient,
    ) -> None:
        self._tokens = token_service
        self._catalog = catalog_client

    async def get_locker(self, external_id: str) -> Locker:
        # Keeps the stored tokens warm; the catalog itself is public.
        await self._tokens.ensure_fresh(external_id)

        raw_items = await self._catalog.fetch_items()
        items = [
            CatalogItem.from_payload(raw) for raw in raw_items if isinstance(raw, dict)
        ]
        locker = project_locker(items)
        logger.info(
            "Built locker for %s: %s", external_id, locker.counts.model_dump()
        )
        return locker


__all__ = [
    "CatalogItem",
    "CosmeticsService",
    "EMOTES",
    "EXCLUSIVES",
    "OWNERSHIP_TAG_KEYWORDS",
    "PICKAXES",
    "SKINS",
    "TYPED_BUCKET_LIMIT",
    "classify_item",
    "project_locker",
]
