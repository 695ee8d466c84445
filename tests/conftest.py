"""Shared test fixtures: in-memory DuckDB, a controllable clock, a fake API client."""

import asyncio

import httpx
import pytest

from app.repositories import CacheRepository, MarkerRepository, connect
from app.services import HostEnvironment, VocabularyCacheService

CATEGORIES = [{"id": 1, "name": "Fruits"}, {"id": 2, "name": "Drinks"}]


class FakeClock:
    """Callable clock returning POSIX seconds; moves only when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeVocabularyClient:
    """Stands in for VocabularyClient; records every call it serves."""

    def __init__(self, delay: float = 0.01):
        self.calls: list[str] = []
        self.delay = delay
        self.offline = False
        self.revision = 1

    async def _respond(self, path: str, body: list[dict]) -> list[dict]:
        self.calls.append(path)
        await asyncio.sleep(self.delay)
        if self.offline:
            raise httpx.ConnectError(f"offline: {path}")
        return body

    async def table(self, name: str) -> list[dict]:
        return await self._respond(name, [{"word": f"{name}-r{self.revision}", "meaning": "m"}])

    async def categories(self, base: str) -> list[dict]:
        return await self._respond(f"{base}-categories", CATEGORIES)

    async def category(self, base: str, category: str) -> list[dict]:
        row = {"word": f"{base}/{category}-r{self.revision}", "meaning": "m", "category": category}
        return await self._respond(f"{base}/{category}", [row])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def conn():
    conn = connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def store(conn, clock) -> CacheRepository:
    return CacheRepository(conn.cursor(), clock)


@pytest.fixture
def markers(conn, clock) -> MarkerRepository:
    return MarkerRepository(conn.cursor(), clock)


@pytest.fixture
def client() -> FakeVocabularyClient:
    return FakeVocabularyClient()


@pytest.fixture
def service(store, client) -> VocabularyCacheService:
    return VocabularyCacheService(store=store, client=client, ttl=60)


@pytest.fixture
def host() -> HostEnvironment:
    return HostEnvironment()
