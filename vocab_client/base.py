"""Base HTTP client for the vocabulary read endpoints."""

import asyncio

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from settings import API_BASE_URL, API_RETRIES, API_TIMEOUT, MAX_CONCURRENT

RETRYABLE_STATUS = {429, 500, 502, 503, 504}
DEFAULT_HEADERS = {"Accept": "application/json", "User-Agent": "quickfrench-cache"}


def _is_retryable_error(exc: BaseException) -> bool:
    """Dropped connections, timeouts, throttling and gateway/server errors."""
    if isinstance(exc, (httpx.ReadError, httpx.ConnectError, httpx.TimeoutException)):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code in RETRYABLE_STATUS


def _log_retry(state: RetryCallState) -> None:
    path = state.args[1] if len(state.args) > 1 else "?"
    logger.warning(
        "GET /{} failed (attempt {}), retrying in {:.1f}s: {}",
        path,
        state.attempt_number,
        state.next_action.sleep if state.next_action else 0,
        state.outcome.exception() if state.outcome else None,
    )


class BaseClient:
    """Async JSON client: one pooled connection set, a concurrency cap, retries.

    Use as ``async with Client() as client``. A transport can be injected to
    route requests elsewhere (an edge interceptor, or a mock in tests).
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        max_concurrent: int = MAX_CONCURRENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._sem = asyncio.Semaphore(max_concurrent)
        self._request_count = 0
        logger.info("{}: base_url={}, max_concurrent={}", self.__class__.__name__, self._base_url, max_concurrent)

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=DEFAULT_HEADERS,
            timeout=API_TIMEOUT,
            limits=httpx.Limits(max_connections=MAX_CONCURRENT, max_keepalive_connections=MAX_CONCURRENT),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_):
        logger.info("{}: {} API requests", self.__class__.__name__, self._request_count)
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def request_count(self) -> int:
        return self._request_count

    @retry(
        stop=stop_after_attempt(API_RETRIES),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=10),
        retry=retry_if_exception(_is_retryable_error),
        before_sleep=_log_retry,
        reraise=True,
    )
    async def _get(self, path: str) -> dict | list:
        """GET ``path`` relative to the base URL and decode the JSON body."""
        if self._client is None:
            raise RuntimeError(f"{self.__class__.__name__} used outside 'async with'")
        async with self._sem:
            self._request_count += 1
            resp = await self._client.get(path)
            logger.debug("GET /{} -> {}", path, resp.status_code)
            resp.raise_for_status()
            return resp.json()
