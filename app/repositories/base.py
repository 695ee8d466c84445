"""Base repository class."""

import asyncio
import time
from collections.abc import Callable
from typing import Any

import duckdb
from loguru import logger


class BaseRepository:
    """Base repository with common functionality.

    DuckDB calls are blocking, so every public coroutine hands its work to a
    worker thread. One lock per repository serializes those calls in the order
    they were issued, which also gives last-write-wins by issuance.
    """

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection,
        clock: Callable[[], float] = time.time,
    ):
        self._db = conn
        self._clock = clock
        self._lock = asyncio.Lock()
        logger.debug("{} initialized", self.__class__.__name__)

    def now(self) -> float:
        return self._clock()

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking DB call off the event loop, one at a time."""
        async with self._lock:
            return await asyncio.to_thread(fn, *args)

    def execute(self, query: str, params: list | None = None) -> Any:
        """Execute SQL query."""
        if params:
            return self._db.execute(query, params)
        return self._db.execute(query)

    def fetchall(self, query: str, params: list | None = None) -> list:
        """Execute and fetch all rows."""
        return self.execute(query, params).fetchall()

    def fetchone(self, query: str, params: list | None = None) -> Any:
        """Execute and fetch one row."""
        return self.execute(query, params).fetchone()

    def close(self) -> None:
        self._db.close()
        logger.debug("{} closed", self.__class__.__name__)
