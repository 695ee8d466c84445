"""Common models - base classes and shared tables."""

from app.models.common.base import BaseEntity
from app.models.common.cache import CACHE_DDL, CACHE_META_DDL
from app.models.common.entities import CacheEntry, CacheInfo
from app.models.common.marker import MARKER_DDL

__all__ = [
    "BaseEntity",
    "CACHE_DDL",
    "CACHE_META_DDL",
    "MARKER_DDL",
    "CacheEntry",
    "CacheInfo",
]
