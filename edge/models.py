"""Edge cache tables - named buckets of request/response pairs."""

from dataclasses import dataclass

from app.models.common import BaseEntity

EDGE_BUCKET_DDL = """
CREATE TABLE IF NOT EXISTS edge_bucket (
    name VARCHAR PRIMARY KEY,
    created_at DOUBLE NOT NULL
)
"""

EDGE_RESPONSE_DDL = """
CREATE TABLE IF NOT EXISTS edge_response (
    bucket VARCHAR NOT NULL,
    url VARCHAR NOT NULL,
    status INTEGER NOT NULL,
    headers JSON NOT NULL,
    body BLOB NOT NULL,
    stored_at DOUBLE NOT NULL,
    PRIMARY KEY (bucket, url)
)
"""

EDGE_DDL = [EDGE_BUCKET_DDL, EDGE_RESPONSE_DDL]


@dataclass
class StoredResponse(BaseEntity):
    """A response as kept in a bucket."""

    url: str
    status: int
    headers: list[tuple[str, str]]
    body: bytes
    stored_at: float
