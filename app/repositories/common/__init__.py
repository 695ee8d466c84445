"""Common repositories - persistent cache and markers."""

from app.repositories.common.cache import CacheRepository
from app.repositories.common.marker import MarkerRepository, version_key

__all__ = ["CacheRepository", "MarkerRepository", "version_key"]
