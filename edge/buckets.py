"""Bucket storage - the interceptor's own persistent response cache."""

import json

import duckdb
import httpx
from loguru import logger

from app.errors import StorageError
from app.repositories.base import BaseRepository
from edge.models import EDGE_DDL, StoredResponse
from settings import EDGE_DB_PATH

# Body is stored decoded, so transfer framing headers no longer apply
_DROP_HEADERS = {"content-encoding", "content-length", "transfer-encoding"}


def connect_edge(db_path: str = EDGE_DB_PATH) -> duckdb.DuckDBPyConnection:
    """Open the edge cache database with its tables created."""
    conn = duckdb.connect(db_path)
    for ddl in EDGE_DDL:
        conn.execute(ddl)
    logger.debug("Edge DB connected: {}", db_path)
    return conn


def to_response(stored: StoredResponse) -> httpx.Response:
    return httpx.Response(
        stored.status,
        headers=stored.headers,
        content=stored.body,
        request=httpx.Request("GET", stored.url),
    )


class BucketStore(BaseRepository):
    """Named buckets of GET responses keyed by exact URL.

    Lookups fail softly (a miss); writes raise ``StorageError``.
    """

    async def open(self, name: str) -> "Bucket":
        """Bucket handle, creating the bucket when missing."""
        await self._write(
            "INSERT INTO edge_bucket (name, created_at) VALUES (?, ?) ON CONFLICT DO NOTHING",
            [name, self.now()],
        )
        return Bucket(self, name)

    async def keys(self) -> list[str]:
        """Bucket names, oldest first."""
        rows = await self._run(self.fetchall, "SELECT name FROM edge_bucket ORDER BY created_at, name")
        return [r[0] for r in rows]

    async def delete(self, name: str) -> bool:
        """Drop a bucket with everything in it; False when it did not exist."""
        existed = name in await self.keys()
        await self._write("DELETE FROM edge_response WHERE bucket = ?", [name])
        await self._write("DELETE FROM edge_bucket WHERE name = ?", [name])
        if existed:
            logger.info("Edge bucket deleted: {}", name)
        return existed

    async def match(self, url: str, bucket: str | None = None) -> httpx.Response | None:
        """Cached response for ``url`` in one bucket, or the oldest bucket holding it."""
        query = """
            SELECT r.url, r.status, r.headers, r.body, r.stored_at
            FROM edge_response r JOIN edge_bucket b ON r.bucket = b.name
            WHERE r.url = ?
        """
        params = [url]
        if bucket is not None:
            query += " AND r.bucket = ?"
            params.append(bucket)
        query += " ORDER BY b.created_at, b.name LIMIT 1"

        try:
            row = await self._run(self.fetchone, query, params)
        except duckdb.Error as e:
            logger.warning("Edge cache read failed: {}: {}", url, e)
            return None
        if row is None:
            return None

        try:
            headers = [tuple(h) for h in json.loads(row[2])]
        except ValueError as e:
            logger.warning("Edge cache entry unreadable: {}: {}", url, e)
            return None
        return to_response(StoredResponse.from_row((*row[:2], headers, *row[3:])))

    async def put(self, bucket: str, url: str, response: httpx.Response) -> None:
        """Store a copy of a (fully read) response."""
        await response.aread()
        headers = [(k, v) for k, v in response.headers.multi_items() if k.lower() not in _DROP_HEADERS]
        await self._write(
            """
            INSERT OR REPLACE INTO edge_response (bucket, url, status, headers, body, stored_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [bucket, url, response.status_code, json.dumps(headers), response.content, self.now()],
        )
        logger.debug("Edge cached [{}]: {}", bucket, url)

    async def urls(self, bucket: str) -> list[str]:
        rows = await self._run(self.fetchall, "SELECT url FROM edge_response WHERE bucket = ? ORDER BY url", [bucket])
        return [r[0] for r in rows]

    async def _write(self, query: str, params: list | None = None) -> None:
        try:
            await self._run(self.execute, query, params)
        except duckdb.Error as e:
            raise StorageError(f"Edge cache write failed: {e}") from e


class Bucket:
    """Handle on one named bucket."""

    def __init__(self, store: BucketStore, name: str):
        self._store = store
        self.name = name

    async def match(self, url: str) -> httpx.Response | None:
        return await self._store.match(url, bucket=self.name)

    async def put(self, url: str, response: httpx.Response) -> None:
        await self._store.put(self.name, url, response)

    async def urls(self) -> list[str]:
        return await self._store.urls(self.name)
