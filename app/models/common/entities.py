"""Cache entities."""

from dataclasses import dataclass
from typing import Any

from app.models.common.base import BaseEntity


@dataclass
class CacheEntry(BaseEntity):
    """A stored value with its write and expiry times (POSIX seconds)."""

    key: str
    value: Any
    written_at: float
    expires_at: float

    def __post_init__(self):
        if self.expires_at <= self.written_at:
            raise ValueError(f"Entry {self.key!r} expires before it was written")

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class CacheInfo(BaseEntity):
    """Diagnostic snapshot of the persistent cache."""

    count: int = 0
    approx_bytes: int = 0
    oldest_write: float | None = None
    newest_write: float | None = None
