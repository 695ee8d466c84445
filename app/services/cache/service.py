"""Vocabulary cache service - read-through cache over the persistent store."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

from loguru import logger

from app.errors import StorageError
from app.models import DATASETS, GROUPED_DATASETS, CacheInfo, get_dataset, parameterized_key
from app.models.vocabulary import CATEGORIES_SUFFIX
from app.repositories import CacheRepository
from settings import CACHE_TTL
from vocab_client import NETWORK_ERRORS, VocabularyClient

FetchFn = Callable[[], Awaitable[Any]]


class VocabularyCacheService:
    """Read-through cache with TTL, force refresh, coalescing and stale fallback.

    At most one fetch per key is in flight. Concurrent callers of the same key
    share that fetch and all see its outcome. A forced refresh always starts a
    new fetch and takes over the key's slot, so unforced callers arriving
    while it runs join the forced fetch.
    """

    def __init__(
        self,
        store: CacheRepository,
        client: VocabularyClient,
        ttl: float = CACHE_TTL,
    ):
        self._store = store
        self._client = client
        self._ttl = ttl
        self._pending: dict[str, asyncio.Task] = {}

    @property
    def pending_keys(self) -> frozenset[str]:
        return frozenset(self._pending)

    # ========== Core algorithm ==========

    async def read_through(
        self,
        key: str,
        fetch_fn: FetchFn,
        ttl: float | None = None,
        force_refresh: bool = False,
    ) -> Any:
        """Cached value for ``key``, fetching it with ``fetch_fn`` on a miss."""
        ttl = self._ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")

        task = None if force_refresh else self._pending.get(key)
        if task is not None:
            logger.debug("Joining in-flight fetch: {}", key)
        else:
            # Registered before the first await, so no second caller can slip in
            task = asyncio.ensure_future(self._load(key, fetch_fn, ttl, use_cache=not force_refresh))
            self._pending[key] = task
            task.add_done_callback(partial(self._release, key))

        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled():
            task.exception()  # retrieved here; awaiters that left would leave it unobserved

    async def _load(self, key: str, fetch_fn: FetchFn, ttl: float, use_cache: bool) -> Any:
        if use_cache:
            # Expired entries stay in place for the stale fallback
            entry = await self._store.get_entry(key, ignore_expiry=True)
            if entry is not None and not entry.is_expired(self._store.now()):
                return entry.value
        return await self._perform_fetch(key, fetch_fn, ttl)

    async def _perform_fetch(self, key: str, fetch_fn: FetchFn, ttl: float) -> Any:
        try:
            data = await fetch_fn()
        except NETWORK_ERRORS as e:
            stale = await self._store.get_entry(key, ignore_expiry=True)
            if stale is not None:
                logger.warning("Fetch failed for {}, serving cached copy: {}", key, e)
                return stale.value
            logger.error("Fetch failed for {} and nothing is cached: {}", key, e)
            raise

        try:
            await self._store.set(key, data, ttl)
        except StorageError as e:
            logger.warning("Could not cache {}: {}", key, e)
        return data

    # ========== Datasets ==========

    async def dataset(self, name: str, force_refresh: bool = False) -> list[dict]:
        """Every row of a table (flat or grouped)."""
        ds = get_dataset(name)
        return await self.read_through(ds.key, partial(self._client.table, ds.name), force_refresh=force_refresh)

    async def categories(self, base: str, force_refresh: bool = False) -> list[dict]:
        """Category list of a grouped table."""
        ds = get_dataset(base)
        return await self.read_through(
            ds.categories_key,
            partial(self._client.categories, ds.name),
            force_refresh=force_refresh,
        )

    async def category_names(self, base: str, force_refresh: bool = False) -> list[str]:
        return [c["name"] for c in await self.categories(base, force_refresh)]

    async def category_items(self, base: str, category: str, force_refresh: bool = False) -> list[dict]:
        """Rows of one category of a grouped table."""
        ds = get_dataset(base)
        return await self.read_through(
            ds.category_key(category),
            partial(self._client.category, ds.name, category),
            force_refresh=force_refresh,
        )

    async def adjectives(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("adjectives", force_refresh)

    async def adverbs(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("adverbs", force_refresh)

    async def numbers(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("numbers", force_refresh)

    async def prepositions(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("prepositions", force_refresh)

    async def verbs(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("verbs", force_refresh)

    async def transportation(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("transportation", force_refresh)

    async def buildings(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("buildings", force_refresh)

    async def colours(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("colours", force_refresh)

    async def hobbies(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("hobbies", force_refresh)

    async def wardrobe(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("wardrobe", force_refresh)

    async def culture(self, force_refresh: bool = False) -> list[dict]:
        return await self.dataset("culture", force_refresh)

    async def _grouped(self, base: str, category: str | None, force_refresh: bool) -> list[dict]:
        if category:
            return await self.category_items(base, category, force_refresh)
        return await self.dataset(base, force_refresh)

    async def food(self, category: str | None = None, force_refresh: bool = False) -> list[dict]:
        """All food, or one food category."""
        return await self._grouped("food", category, force_refresh)

    async def family(self, category: str | None = None, force_refresh: bool = False) -> list[dict]:
        return await self._grouped("family", category, force_refresh)

    async def home(self, category: str | None = None, force_refresh: bool = False) -> list[dict]:
        return await self._grouped("home", category, force_refresh)

    async def nature(self, category: str | None = None, force_refresh: bool = False) -> list[dict]:
        return await self._grouped("nature", category, force_refresh)

    async def ict(self, category: str | None = None, force_refresh: bool = False) -> list[dict]:
        return await self._grouped("ict", category, force_refresh)

    async def shopping(self, category: str | None = None, force_refresh: bool = False) -> list[dict]:
        return await self._grouped("shopping", category, force_refresh)

    async def education(self, category: str | None = None, force_refresh: bool = False) -> list[dict]:
        return await self._grouped("education", category, force_refresh)

    async def work(self, category: str | None = None, force_refresh: bool = False) -> list[dict]:
        return await self._grouped("work", category, force_refresh)

    async def body(self, category: str | None = None, force_refresh: bool = False) -> list[dict]:
        """All body/health words, or one body category."""
        return await self._grouped("body", category, force_refresh)

    async def preload_all(self, force_refresh: bool = False) -> int:
        """Walk every dataset, category list and category through the cache.

        Runs concurrently; every job is allowed to settle, then the first
        failure (if any) is raised. Returns the number of resources loaded.
        """
        jobs = [self.dataset(name, force_refresh) for name in DATASETS]
        jobs += [self._preload_categories(base, force_refresh) for base in GROUPED_DATASETS]
        results = await asyncio.gather(*jobs, return_exceptions=True)

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.warning("Preload: {} of {} jobs failed", len(failures), len(jobs))
            raise failures[0]

        loaded = len(DATASETS) + sum(results[len(DATASETS) :])
        logger.info("Preload complete: {} resources{}", loaded, " [FORCE]" if force_refresh else "")
        return loaded

    async def _preload_categories(self, base: str, force_refresh: bool) -> int:
        names = await self.category_names(base, force_refresh)
        results = await asyncio.gather(
            *(self.category_items(base, name, force_refresh) for name in names),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            raise failures[0]
        logger.debug("Preloaded {}: {} categories", base, len(names))
        return 1 + len(names)

    # ========== Eviction & maintenance ==========

    async def clear_all(self) -> None:
        """Empty the store and forget in-flight bookkeeping."""
        await self._store.clear()
        self._pending.clear()

    async def clear_dataset(self, key: str) -> None:
        await self._store.delete(key)

    async def clear_parameterized(self, base: str, category: str | None = None) -> int:
        """Evict one category of ``base``, or all of them when no category is given.

        The category list itself is kept.
        """
        if category is not None:
            await self._store.delete(parameterized_key(base, category))
            return 1
        return await self._store.delete_prefix(
            f"{base}-",
            exclude=(parameterized_key(base, CATEGORIES_SUFFIX),),
        )

    async def clear_topic(self, topic: str) -> None:
        """Evict a table and, for grouped tables, its categories too."""
        ds = get_dataset(topic)
        await self._store.delete(ds.key)
        if ds.grouped:
            await self._store.delete(ds.categories_key)
            await self.clear_parameterized(ds.name)
        logger.info("Cache cleared for topic {}", topic)

    async def clean_expired(self) -> int:
        return await self._store.sweep_expired()

    async def cache_info(self) -> CacheInfo:
        info = await self._store.info()
        logger.debug("Cache info: {}", info.to_dict())
        return info
