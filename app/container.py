"""Dependency container - one explicitly built instance per process."""

import httpx

from app.repositories import CacheRepository, MarkerRepository, connect
from app.services import HostEnvironment, VocabularyCacheService, WarmupController
from settings import API_BASE_URL, DB_PATH
from vocab_client import VocabularyClient


class Container:
    """Foreground components wired together.

    Build it once at startup and hand it to whatever needs the cache; nothing
    here is stored at module level.
    """

    def __init__(
        self,
        db_path: str = DB_PATH,
        base_url: str = API_BASE_URL,
        host: HostEnvironment | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._conn = connect(db_path)

        # Repositories (each gets its own cursor, safe to use from worker threads)
        self.cache_repo = CacheRepository(self._conn.cursor())
        self.marker_repo = MarkerRepository(self._conn.cursor())

        self.client = VocabularyClient(base_url=base_url, transport=transport)
        self.host = host or HostEnvironment()

        # Services (with injected repos)
        self.cache = VocabularyCacheService(store=self.cache_repo, client=self.client)
        self.warmup = WarmupController(
            service=self.cache,
            markers=self.marker_repo,
            host=self.host,
        )

    async def __aenter__(self):
        await self.client.__aenter__()
        return self

    async def __aexit__(self, *exc):
        await self.client.__aexit__(*exc)
        self.cache_repo.close()
        self.marker_repo.close()
        self._conn.close()
