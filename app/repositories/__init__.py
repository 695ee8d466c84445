"""Repositories package - data access layer for the local cache database."""

from app.repositories.base import BaseRepository
from app.repositories.common import CacheRepository, MarkerRepository
from app.repositories.db import (
    connect,
    db_exists,
    init_tables,
    migrate_cache_schema,
)

__all__ = [
    # DB
    "connect",
    "db_exists",
    "init_tables",
    "migrate_cache_schema",
    # Base
    "BaseRepository",
    # Common
    "CacheRepository",
    "MarkerRepository",
]
