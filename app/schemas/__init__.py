"""Public schema exports."""

from .auth import ErrorResponse, RefreshResult
from .cosmetics import Locker, LockerCounts, LockerItem

__all__ = [
    "ErrorResponse",
    "Locker",
    "LockerCounts",
    "LockerItem",
    "RefreshResult",
]
