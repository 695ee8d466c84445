"""Persistent data cache tables."""

CACHE_META_DDL = """
CREATE TABLE IF NOT EXISTS cache_meta (
    name VARCHAR PRIMARY KEY,
    value VARCHAR NOT NULL
)
"""

CACHE_DDL = """
CREATE TABLE IF NOT EXISTS cache_entry (
    key VARCHAR PRIMARY KEY,
    value JSON NOT NULL,
    written_at DOUBLE NOT NULL,
    expires_at DOUBLE NOT NULL,
    CHECK (expires_at > written_at)
)
"""

