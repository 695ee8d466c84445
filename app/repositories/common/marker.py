"""Marker repository - persisted warmup version."""

import duckdb
from loguru import logger

from app.errors import StorageError
from app.repositories.base import BaseRepository


def version_key(version: str) -> tuple:
    """Sort key for version strings ("2" < "10", "1.2" < "1.10")."""
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in version.split("."))


class MarkerRepository(BaseRepository):
    """Named version markers (e.g. the warmup version that last completed)."""

    async def get(self, name: str) -> str | None:
        """Stored version, None when unset or unreadable."""
        try:
            row = await self._run(self.fetchone, "SELECT version FROM warmup_marker WHERE name = ?", [name])
        except duckdb.Error as e:
            logger.warning("Marker read failed: {}: {}", name, e)
            return None
        return row[0] if row else None

    async def advance(self, name: str, version: str) -> bool:
        """Record ``version`` unless an equal or newer one is stored.

        Returns True when the marker moved.
        """
        current = await self.get(name)
        if current is not None and version_key(current) >= version_key(version):
            if current != version:
                logger.warning("Marker {} is at {}, not regressing to {}", name, current, version)
            return False

        try:
            await self._run(
                self.execute,
                "INSERT OR REPLACE INTO warmup_marker (name, version, updated_at) VALUES (?, ?, ?)",
                [name, version, self.now()],
            )
        except duckdb.Error as e:
            raise StorageError(f"Marker write failed for {name!r}: {e}") from e
        logger.info("Marker {}: {} -> {}", name, current, version)
        return True

    async def is_current(self, name: str, version: str) -> bool:
        """True when the stored marker is ``version`` or newer."""
        current = await self.get(name)
        return current is not None and version_key(current) >= version_key(version)
