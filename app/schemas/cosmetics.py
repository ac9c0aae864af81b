"""Schemas for the derived cosmetics "locker" view."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class LockerItem(BaseModel):
    """A catalog item presented as likely owned."""

    name: str
    image: Optional[str] = Field(None, description="Icon URL, or featured art when no icon exists.")
    rarity: str = "Unknown"
    id: str


class LockerCounts(BaseModel):
    """Totals per bucket, counted before the typed buckets are truncated."""

    skins: int = 0
    pickaxes: int = 0
    emotes: int = 0
    exclusives: int = 0


class Locker(BaseModel):
    skins: List[LockerItem] = Field(default_factory=list)
    pickaxes: List[LockerItem] = Field(default_factory=list)
    emotes: List[LockerItem] = Field(default_factory=list)
    exclusives: List[LockerItem] = Field(default_factory=list)
    counts: LockerCounts = Field(default_factory=LockerCounts)


__all__ = ["Locker", "LockerCounts", "LockerItem"]
