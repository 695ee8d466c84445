"""Data cache service."""

from app.services.cache.service import FetchFn, VocabularyCacheService

__all__ = ["FetchFn", "VocabularyCacheService"]
