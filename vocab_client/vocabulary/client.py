"""Vocabulary API client - per-table read endpoints."""

from urllib.parse import quote

import httpx
from pydantic import ValidationError

from app.errors import FetchError
from vocab_client.base import BaseClient

from .schemas import CategorySchema, WordSchema


class VocabularyClient(BaseClient):
    """Client for the vocabulary read endpoints."""

    async def _get_validated(self, path: str, schema) -> list[dict]:
        try:
            rows = await self._get(path)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError both land here
            raise FetchError(f"Undecodable body from /{path}: {e}") from e
        if not isinstance(rows, list):
            raise FetchError(f"Expected a list from /{path}, got {type(rows).__name__}")
        try:
            return [schema.model_validate(r).model_dump(exclude_unset=True) for r in rows]
        except ValidationError as e:
            raise FetchError(f"Unexpected payload from /{path}: {e.error_count()} errors") from e

    async def table(self, name: str) -> list[dict]:
        """GET /api/{name} - every row of a table."""
        return await self._get_validated(f"api/{name}", WordSchema)

    async def categories(self, base: str) -> list[dict]:
        """GET /api/{base}-categories - categories of a grouped table."""
        return await self._get_validated(f"api/{base}-categories", CategorySchema)

    async def category(self, base: str, category: str) -> list[dict]:
        """GET /api/{base}/{category} - rows of one category."""
        return await self._get_validated(f"api/{base}/{quote(category, safe='')}", WordSchema)


NETWORK_ERRORS = (httpx.HTTPError, FetchError)
