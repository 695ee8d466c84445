"""Cache repository - persistent key-value store for fetched datasets."""

import json
from typing import Any

import duckdb
from loguru import logger

from app.errors import StorageError
from app.models import CacheEntry, CacheInfo
from app.repositories.base import BaseRepository


class CacheRepository(BaseRepository):
    """JSON values keyed by string, each with a write time and an expiry time.

    Reads fail softly: a storage error or an undecodable row is logged and
    reported as a miss. Writes raise ``StorageError``. An entry whose expiry
    has passed is a miss and is deleted on read, unless the caller asks for it
    with ``ignore_expiry=True`` (stale fallback).
    """

    async def get_entry(self, key: str, ignore_expiry: bool = False) -> CacheEntry | None:
        """Load an entry, or None when absent/expired/unreadable."""
        try:
            return await self._run(self._get_entry, key, ignore_expiry)
        except (duckdb.Error, ValueError) as e:
            logger.warning("Cache read failed: key={}: {}", key, e)
            return None

    async def get(self, key: str, ignore_expiry: bool = False) -> Any | None:
        """Load a cached value."""
        entry = await self.get_entry(key, ignore_expiry)
        return entry.value if entry else None

    def _get_entry(self, key: str, ignore_expiry: bool) -> CacheEntry | None:
        row = self.fetchone(
            "SELECT value, written_at, expires_at FROM cache_entry WHERE key = ?",
            [key],
        )
        if row is None:
            return None

        entry = CacheEntry.from_row((key, json.loads(row[0]), *row[1:]))
        if ignore_expiry or not entry.is_expired(self.now()):
            logger.debug("Cache hit: {}", key)
            return entry

        try:
            self.execute("DELETE FROM cache_entry WHERE key = ? AND expires_at <= ?", [key, self.now()])
            logger.debug("Cache expired, deleted: {}", key)
        except duckdb.Error as e:
            logger.warning("Failed to delete expired entry {}: {}", key, e)
        return None

    async def set(self, key: str, value: Any, ttl: float) -> CacheEntry:
        """Store a value for ``ttl`` seconds, replacing any existing entry."""
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key!r} is not JSON-serializable: {e}") from e

        try:
            return await self._run(self._set, key, value, payload, ttl)
        except duckdb.Error as e:
            raise StorageError(f"Cache write failed for {key!r}: {e}") from e

    def _set(self, key: str, value: Any, payload: str, ttl: float) -> CacheEntry:
        now = self.now()
        entry = CacheEntry(key=key, value=value, written_at=now, expires_at=now + ttl)
        self.execute(
            """
            INSERT OR REPLACE INTO cache_entry (key, value, written_at, expires_at)
            VALUES (?, ?, ?, ?)
            """,
            [key, payload, entry.written_at, entry.expires_at],
        )
        logger.debug("Cache saved: {} (ttl={}s)", key, ttl)
        return entry

    async def delete(self, key: str) -> None:
        """Delete one entry (no-op when missing)."""
        await self._write("DELETE FROM cache_entry WHERE key = ?", [key])
        logger.debug("Cache deleted: {}", key)

    async def clear(self) -> None:
        """Delete every entry."""
        await self._write("DELETE FROM cache_entry")
        logger.info("All cache cleared")

    async def list_keys(self, prefix: str | None = None) -> list[str]:
        """Stored keys, optionally only those starting with ``prefix``."""
        try:
            if prefix is None:
                rows = await self._run(self.fetchall, "SELECT key FROM cache_entry ORDER BY key")
            else:
                rows = await self._run(
                    self.fetchall,
                    "SELECT key FROM cache_entry WHERE starts_with(key, ?) ORDER BY key",
                    [prefix],
                )
        except duckdb.Error as e:
            raise StorageError(f"Listing cache keys failed: {e}") from e
        return [r[0] for r in rows]

    async def delete_prefix(self, prefix: str, exclude: tuple[str, ...] = ()) -> int:
        """Delete every key starting with ``prefix`` except ``exclude``."""
        keys = [k for k in await self.list_keys(prefix) if k not in exclude]
        if not keys:
            return 0
        placeholders = ", ".join("?" for _ in keys)
        await self._write(f"DELETE FROM cache_entry WHERE key IN ({placeholders})", keys)
        logger.info("Cache cleared for prefix {!r}: {} entries", prefix, len(keys))
        return len(keys)

    async def sweep_expired(self) -> int:
        """Delete every expired entry; only the expiry column is scanned."""
        try:
            row = await self._run(self.fetchone, "DELETE FROM cache_entry WHERE expires_at <= ?", [self.now()])
        except duckdb.Error as e:
            raise StorageError(f"Expired sweep failed: {e}") from e
        removed = row[0] if row else 0
        if removed:
            logger.info("Swept {} expired cache entries", removed)
        return removed

    async def info(self) -> CacheInfo:
        """Count, approximate serialized size and write-time range."""
        try:
            row = await self._run(
                self.fetchone,
                """
                SELECT count(*), coalesce(sum(strlen(key) + strlen(value::VARCHAR)), 0),
                       min(written_at), max(written_at)
                FROM cache_entry
                """,
            )
        except duckdb.Error as e:
            raise StorageError(f"Cache info failed: {e}") from e
        return CacheInfo.from_row(row)

    async def _write(self, query: str, params: list | None = None) -> None:
        try:
            await self._run(self.execute, query, params)
        except duckdb.Error as e:
            raise StorageError(f"Cache write failed: {e}") from e
