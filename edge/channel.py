"""One-way control channel from the foreground application to the interceptor."""

import asyncio

SKIP_WAITING = "SKIP_WAITING"

_CLOSED = object()


class ControlChannel:
    """Message queue; the interceptor consumes it with ``async for``."""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()

    def post(self, message: str) -> None:
        self._queue.put_nowait(message)

    def close(self) -> None:
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        message = await self._queue.get()
        if message is _CLOSED:
            raise StopAsyncIteration
        return message
