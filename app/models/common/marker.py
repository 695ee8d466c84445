"""Warmup marker table - one row per named marker."""

MARKER_DDL = """
CREATE TABLE IF NOT EXISTS warmup_marker (
    name VARCHAR PRIMARY KEY,
    version VARCHAR NOT NULL,
    updated_at DOUBLE NOT NULL
)
"""
