"""DuckDB connection management."""

from pathlib import Path

import duckdb
from loguru import logger

from app.models import ALL_DDL, CACHE_DDL
from settings import CACHE_SCHEMA_VERSION, DB_PATH

SCHEMA_VERSION_KEY = "schema_version"


def db_exists(db_path: str = DB_PATH) -> bool:
    """Check if database file exists."""
    return db_path == ":memory:" or Path(db_path).exists()


def init_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Initialize all tables from DDL statements (idempotent - uses IF NOT EXISTS)."""
    for ddl in ALL_DDL:
        conn.execute(ddl)


def get_schema_version(conn: duckdb.DuckDBPyConnection) -> int | None:
    """Stored cache schema version, None for a fresh database."""
    row = conn.execute("SELECT value FROM cache_meta WHERE name = ?", [SCHEMA_VERSION_KEY]).fetchone()
    return int(row[0]) if row else None


def migrate_cache_schema(conn: duckdb.DuckDBPyConnection, version: int = CACHE_SCHEMA_VERSION) -> bool:
    """Rebuild the cache table when its schema version differs.

    Cached values are disposable, so a version change drops them instead of
    converting rows. Returns True when the table was rebuilt.
    """
    stored = get_schema_version(conn)
    if stored == version:
        return False

    conn.execute("BEGIN TRANSACTION")
    try:
        if stored is not None:
            conn.execute("DROP TABLE IF EXISTS cache_entry")
            conn.execute(CACHE_DDL)
        conn.execute(
            "INSERT OR REPLACE INTO cache_meta (name, value) VALUES (?, ?)",
            [SCHEMA_VERSION_KEY, str(version)],
        )
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise

    if stored is None:
        logger.info("Cache schema initialized at v{}", version)
    else:
        logger.warning("Cache schema v{} -> v{}: cached entries dropped", stored, version)
    return stored is not None


def connect(db_path: str = DB_PATH) -> duckdb.DuckDBPyConnection:
    """Open a connection with tables created and the cache schema current."""
    if not db_exists(db_path):
        logger.warning("DB not found: {}. Creating empty DB.", db_path)
    conn = duckdb.connect(db_path)
    init_tables(conn)
    migrate_cache_schema(conn)
    logger.debug("DB connected: {}", db_path)
    return conn
