"""Request classification for the edge interceptor."""

import re
from enum import StrEnum

import httpx

STATIC_PREFIXES = ("/_next/static", "/_next/image")
STATIC_EXTENSIONS = re.compile(r"\.(?:js|css|woff2?|png|jpg|jpeg|gif|svg|ico|webp)$", re.IGNORECASE)
DEFAULT_PORTS = {"http": 80, "https": 443}
LOCAL_HOSTS = {"localhost", "127.0.0.1"}


class RequestKind(StrEnum):
    """Caching strategy a GET request falls under."""

    NAVIGATION = "navigation"
    STATIC_ASSET = "static_asset"
    API_READ = "api_read"
    OTHER = "other"


def origin_of(url: httpx.URL) -> tuple[str, str, int | None]:
    return url.scheme, url.host, url.port or DEFAULT_PORTS.get(url.scheme)


def is_same_origin(url: httpx.URL, origin: httpx.URL) -> bool:
    return origin_of(url) == origin_of(origin)


def is_navigation(request: httpx.Request) -> bool:
    """Full-page load, as flagged by the browser's fetch metadata."""
    return request.headers.get("sec-fetch-mode", "").lower() == "navigate"


def is_static_path(path: str) -> bool:
    return path.startswith(STATIC_PREFIXES) or bool(STATIC_EXTENSIONS.search(path))


def is_local_dev(origin: httpx.URL) -> bool:
    """Plain http, localhost or a *.local host."""
    return origin.scheme != "https" or origin.host in LOCAL_HOSTS or origin.host.endswith(".local")


def classify(request: httpx.Request, origin: httpx.URL) -> RequestKind:
    if is_navigation(request):
        return RequestKind.NAVIGATION
    if not is_same_origin(request.url, origin):
        return RequestKind.OTHER
    if is_static_path(request.url.path):
        return RequestKind.STATIC_ASSET
    return RequestKind.API_READ
