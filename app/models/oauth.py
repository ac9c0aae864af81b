"""
Domain models for Epic token persistence.
"""

from pydantic import BaseModel, Field


class TokenRecord(BaseModel):
    """The single stored token row for one linked external user."""

    external_id: str = Field(..., description="Caller supplied user id (Discord id).")
    access_token: str
    refresh_token: str = ""
    expires_at: int = Field(..., description="UNIX seconds after which the token is stale.")

    def expires_within(self, seconds: int, *, now: float) -> bool:
        return now > self.expires_at - seconds


__all__ = ["TokenRecord"]
