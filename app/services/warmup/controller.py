"""Warmup controller - fills the persistent cache once per warmup version."""

import asyncio
from enum import StrEnum

from loguru import logger

from app.repositories import MarkerRepository
from app.services.cache import VocabularyCacheService
from app.services.host import ONLINE, VISIBLE, WARMUP_COMPLETE, HostEnvironment
from settings import WARMUP_MARKER, WARMUP_RETRY_DELAY, WARMUP_VERSION


class WarmupState(StrEnum):
    """Warmup lifecycle."""

    IDLE = "idle"
    WARMING = "warming"
    DONE = "done"


class WarmupController:
    """Walks every dataset through the cache ahead of offline use.

    IDLE -> WARMING -> DONE, back to IDLE on failure. Starts only once the
    host is visible. A failed run leaves the marker untouched and arms one
    retry for when the host comes back online.
    """

    def __init__(
        self,
        service: VocabularyCacheService,
        markers: MarkerRepository,
        host: HostEnvironment,
        version: str = WARMUP_VERSION,
        marker_name: str = WARMUP_MARKER,
        retry_delay: float = WARMUP_RETRY_DELAY,
    ):
        self._service = service
        self._markers = markers
        self._host = host
        self._version = version
        self._marker_name = marker_name
        self._retry_delay = retry_delay
        self._state = WarmupState.IDLE
        self._task: asyncio.Task | None = None
        self._retry_armed = False
        self._waiting_for_visible = False

    @property
    def state(self) -> WarmupState:
        return self._state

    @property
    def version(self) -> str:
        return self._version

    async def start(self) -> None:
        """Begin warmup now, or as soon as the host becomes visible."""
        if self._state is not WarmupState.IDLE or self._waiting_for_visible:
            return

        if await self._markers.is_current(self._marker_name, self._version):
            logger.info("Cache already warmed for version {}", self._version)
            self._state = WarmupState.DONE
            return

        if self._host.visible:
            self._schedule()
        else:
            logger.debug("Warmup deferred until visible")
            self._waiting_for_visible = True
            self._host.events.subscribe(VISIBLE, self._on_visible, once=True)

    async def run(self) -> WarmupState:
        """Start and wait for the outcome."""
        await self.start()
        return await self.wait()

    async def wait(self) -> WarmupState:
        """Wait for the current warmup attempt, if any."""
        if self._task is not None:
            await self._task
        return self._state

    def _on_visible(self) -> None:
        self._waiting_for_visible = False
        self._schedule()

    def _on_online(self) -> None:
        self._retry_armed = False
        if self._state is WarmupState.IDLE:
            logger.info("Back online, retrying cache warmup in {}s", self._retry_delay)
            self._schedule(self._retry_delay)

    def _schedule(self, delay: float = 0.0) -> None:
        if self._state is not WarmupState.IDLE:
            return
        self._state = WarmupState.WARMING
        self._task = asyncio.ensure_future(self._warm(delay))

    async def _warm(self, delay: float) -> bool:
        if delay:
            await asyncio.sleep(delay)

        try:
            await self._host.request_persistent_storage()
        except Exception as e:
            logger.debug("Persistent storage not granted: {}", e)

        try:
            loaded = await self._service.preload_all(force_refresh=False)
            await self._markers.advance(self._marker_name, self._version)
        except Exception as e:
            logger.warning("Cache warmup failed; will retry when back online: {}", e)
            self._state = WarmupState.IDLE
            self._arm_retry()
            return False

        self._state = WarmupState.DONE
        logger.info("Cache warmup v{} done: {} resources", self._version, loaded)
        self._host.events.emit(WARMUP_COMPLETE)
        return True

    def _arm_retry(self) -> None:
        if self._retry_armed:
            return
        self._retry_armed = True
        self._host.events.subscribe(ONLINE, self._on_online, once=True)
