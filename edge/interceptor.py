"""Edge cache interceptor - caching strategies at the network boundary.

Runs apart from the data cache: its only state is two versioned buckets in
its own database, and it only listens to the foreground through a
``ControlChannel``.

    install    precache the app shell into static-{version} (not in dev)
    activate   drop every other bucket (all of them in dev), take control
    handle     navigation: network (or preload) -> exact cache -> "/" -> offline page
               static asset: cache first, then network
               API read: network first, then cache
"""

import asyncio
import re
from collections.abc import Awaitable
from enum import StrEnum

import httpx
from loguru import logger

from app.errors import StorageError
from edge.buckets import BucketStore
from edge.channel import SKIP_WAITING, ControlChannel
from edge.routing import RequestKind, classify, is_local_dev
from settings import EDGE_CACHE_VERSION, EDGE_ORIGIN, NAVIGATION_TIMEOUT, OFFLINE_URL, PRECACHE_URLS

FETCH_ERRORS = (httpx.TransportError, OSError)
CACHEABLE_CONTENT = re.compile(r"^(application|text)/")

OFFLINE_HTML = (
    "<!doctype html><html><head><meta charset='utf-8'><title>Offline</title></head>"
    "<body><h1>You are offline</h1><p>This page is not available offline yet.</p></body></html>"
)


class InstallError(Exception):
    """Precaching the app shell failed; the new version must not activate."""


class InterceptorState(StrEnum):
    """Interceptor lifecycle."""

    NEW = "new"
    INSTALLED = "installed"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class EdgeCacheInterceptor:
    """Per-request-class caching for GET requests of one origin."""

    def __init__(
        self,
        buckets: BucketStore,
        network: httpx.AsyncBaseTransport,
        origin: str = EDGE_ORIGIN,
        version: str = EDGE_CACHE_VERSION,
        precache_urls: list[str] = PRECACHE_URLS,
        navigation_timeout: float = NAVIGATION_TIMEOUT,
        navigation_preload_supported: bool = True,
    ):
        self._buckets = buckets
        self._network = network
        self._origin = httpx.URL(origin)
        self._version = version
        self._precache_urls = precache_urls
        self._navigation_timeout = navigation_timeout
        self._navigation_preload_supported = navigation_preload_supported
        self.dev_mode = is_local_dev(self._origin)
        self.state = InterceptorState.NEW
        self.navigation_preload = False
        self.controlling = False

    @property
    def static_bucket(self) -> str:
        return f"static-{self._version}"

    @property
    def runtime_bucket(self) -> str:
        return f"runtime-{self._version}"

    def resolve(self, path: str) -> str:
        return str(self._origin.join(path))

    # ========== Lifecycle ==========

    async def install(self) -> None:
        """Precache the app shell; in dev nothing is stored."""
        if self.dev_mode:
            logger.info("Edge install v{} (dev): skipping precache", self._version)
            self.state = InterceptorState.INSTALLED
            return

        urls = [self.resolve(p) for p in self._precache_urls]
        try:
            responses = await asyncio.gather(*(self._fetch(httpx.Request("GET", u)) for u in urls))
        except FETCH_ERRORS as e:
            self.state = InterceptorState.REDUNDANT
            raise InstallError(f"Precache fetch failed: {e}") from e

        failed = [u for u, r in zip(urls, responses) if not r.is_success]
        if failed:
            self.state = InterceptorState.REDUNDANT
            raise InstallError(f"Precache got non-success responses for {failed}")

        static = await self._buckets.open(self.static_bucket)
        for url, response in zip(urls, responses):
            await static.put(url, response)

        self.state = InterceptorState.INSTALLED
        logger.info("Edge install v{}: {} shell resources precached", self._version, len(urls))

    async def activate(self) -> None:
        """Enable navigation preload, drop stale buckets, take control."""
        if self.state is InterceptorState.ACTIVATED:
            return
        if self.state is not InterceptorState.INSTALLED:
            raise RuntimeError(f"Cannot activate from state {self.state}")

        if self._navigation_preload_supported:
            self.navigation_preload = True

        keep = set() if self.dev_mode else {self.static_bucket, self.runtime_bucket}
        for name in await self._buckets.keys():
            if name not in keep:
                await self._buckets.delete(name)

        self.state = InterceptorState.ACTIVATED
        self.controlling = True
        logger.info("Edge v{} activated{}", self._version, " (dev)" if self.dev_mode else "")

    async def skip_waiting(self) -> None:
        """Activate an installed version without waiting for clients to go away."""
        if self.state is InterceptorState.INSTALLED:
            await self.activate()

    async def on_message(self, message: str) -> None:
        if message == SKIP_WAITING:
            await self.skip_waiting()
        else:
            logger.debug("Edge ignoring message: {!r}", message)

    async def serve(self, channel: ControlChannel) -> None:
        """Consume control messages until the channel is closed."""
        async for message in channel:
            await self.on_message(message)

    # ========== Requests ==========

    async def handle(
        self,
        request: httpx.Request,
        preload: Awaitable[httpx.Response | None] | None = None,
    ) -> httpx.Response:
        """Answer one outgoing request."""
        if request.method != "GET" or not self.controlling or self.dev_mode:
            return await self._fetch(request)

        kind = classify(request, self._origin)
        match kind:
            case RequestKind.NAVIGATION:
                return await self._navigation(request, preload)
            case RequestKind.STATIC_ASSET:
                return await self._cache_first(request)
            case RequestKind.API_READ:
                return await self._network_first(request)
            case _:
                return await self._fetch(request)

    async def _navigation(
        self,
        request: httpx.Request,
        preload: Awaitable[httpx.Response | None] | None,
    ) -> httpx.Response:
        url = str(request.url)
        try:
            response = await asyncio.wait_for(self._preloaded_or_fetch(request, preload), self._navigation_timeout)
        except FETCH_ERRORS as e:
            logger.info("Navigation offline: {} ({})", url, type(e).__name__)
            return await self._navigation_fallback(url)

        if response.is_success:
            await self._store(self.runtime_bucket, url, response)
        return response

    async def _preloaded_or_fetch(
        self,
        request: httpx.Request,
        preload: Awaitable[httpx.Response | None] | None,
    ) -> httpx.Response:
        if preload is not None and self.navigation_preload:
            response = await preload
            if response is not None:
                return response
        return await self._fetch(request)

    async def _navigation_fallback(self, url: str) -> httpx.Response:
        cached = await self._buckets.match(url, bucket=self.runtime_bucket)
        if cached is not None:
            return cached
        shell = await self._buckets.match(self.resolve("/"))
        if shell is not None:
            return shell
        return await self._offline()

    async def _cache_first(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        cached = await self._buckets.match(url, bucket=self.static_bucket)
        if cached is not None:
            return cached
        try:
            response = await self._fetch(request)
        except FETCH_ERRORS as e:
            logger.info("Asset offline: {} ({})", url, type(e).__name__)
            return await self._offline()
        if response.is_success:
            await self._store(self.static_bucket, url, response)
        return response

    async def _network_first(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        try:
            response = await self._fetch(request)
        except FETCH_ERRORS as e:
            logger.info("API offline: {} ({})", url, type(e).__name__)
            cached = await self._buckets.match(url, bucket=self.runtime_bucket)
            return cached if cached is not None else await self._offline()

        if response.is_success and CACHEABLE_CONTENT.match(response.headers.get("content-type", "")):
            await self._store(self.runtime_bucket, url, response)
        return response

    async def _offline(self) -> httpx.Response:
        cached = await self._buckets.match(self.resolve(OFFLINE_URL))
        if cached is not None:
            return cached
        return httpx.Response(503, headers={"content-type": "text/html; charset=utf-8"}, text=OFFLINE_HTML)

    async def _fetch(self, request: httpx.Request) -> httpx.Response:
        response = await self._network.handle_async_request(request)
        await response.aread()
        return response

    async def _store(self, bucket: str, url: str, response: httpx.Response) -> None:
        try:
            store = await self._buckets.open(bucket)
            await store.put(url, response)
        except StorageError as e:
            logger.warning("Edge cache write failed for {}: {}", url, e)
