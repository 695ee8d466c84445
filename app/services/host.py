"""Host environment - visibility/connectivity signals and completion broadcast."""

import asyncio
import inspect
from collections import defaultdict
from collections.abc import Callable

from loguru import logger

# Event names
VISIBLE = "visible"
ONLINE = "online"
WARMUP_COMPLETE = "quickfrench:cacheWarmupDone"

Handler = Callable[[], object]


class EventBus:
    """Named events without payload; async handlers are scheduled as tasks."""

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, event: str, handler: Handler, once: bool = False) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it."""

        def unsubscribe() -> None:
            if wrapped in self._handlers[event]:
                self._handlers[event].remove(wrapped)

        def wrapped():
            if once:
                unsubscribe()
            return handler()

        self._handlers[event].append(wrapped)
        return unsubscribe

    def emit(self, event: str) -> None:
        """Call every handler of ``event``; handler errors are logged."""
        for handler in list(self._handlers[event]):
            try:
                result = handler()
            except Exception as e:
                logger.error("Handler for {} failed: {}", event, e)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

    def listeners(self, event: str) -> int:
        return len(self._handlers[event])


class HostEnvironment:
    """What the caching core needs to know about the hosting application."""

    def __init__(self, visible: bool = True, online: bool = True, persistence_supported: bool = True):
        self.events = EventBus()
        self._visible = visible
        self._online = online
        self._persistence_supported = persistence_supported
        self.persisted = False

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def online(self) -> bool:
        return self._online

    def set_visible(self, visible: bool) -> None:
        changed = visible != self._visible
        self._visible = visible
        if changed and visible:
            self.events.emit(VISIBLE)

    def set_online(self, online: bool) -> None:
        changed = online != self._online
        self._online = online
        if changed and online:
            self.events.emit(ONLINE)

    async def request_persistent_storage(self) -> bool:
        """Ask the host not to evict local storage (best effort)."""
        if not self._persistence_supported:
            raise RuntimeError("Persistent storage is not supported by this host")
        self.persisted = True
        return True
