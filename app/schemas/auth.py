"""Schemas related to the Epic account link and token refresh endpoints."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class RefreshResult(BaseModel):
    """Returned after the stored Epic tokens were refreshed."""

    ok: bool = True
    expires_at: int = Field(..., description="UNIX seconds when the new access token goes stale.")


class ErrorResponse(BaseModel):
    """Terse machine-readable error body for the JSON endpoints."""

    error: str
    details: Optional[Any] = None


__all__ = ["ErrorResponse", "RefreshResult"]
