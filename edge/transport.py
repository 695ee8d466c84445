"""httpx transport routing a client's requests through the interceptor."""

import httpx

from edge.interceptor import EdgeCacheInterceptor


class EdgeTransport(httpx.AsyncBaseTransport):
    """Mount on an ``httpx.AsyncClient`` to put the interceptor on its path.

    Example:
        interceptor = EdgeCacheInterceptor(buckets, httpx.AsyncHTTPTransport())
        client = httpx.AsyncClient(transport=EdgeTransport(interceptor))
    """

    def __init__(self, interceptor: EdgeCacheInterceptor):
        self._interceptor = interceptor

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._interceptor.handle(request)
