#!/usr/bin/env python3
"""
Manage the local vocabulary cache.

Usage:
    python cache_cli.py warmup          # One-time warmup for the current version
    python cache_cli.py refresh         # Re-download every dataset
    python cache_cli.py info            # Show cache statistics
    python cache_cli.py clear           # Clear the whole cache
    python cache_cli.py clear food      # Clear one topic (and its categories)
    python cache_cli.py sweep           # Delete expired entries
    python cache_cli.py edge            # Install + activate the edge cache
"""

import asyncio
import sys
import time

import httpx
from loguru import logger

from app.container import Container
from app.errors import UnknownDatasetError
from edge import BucketStore, EdgeCacheInterceptor, connect_edge
from settings import EDGE_DB_PATH
from settings.logging import setup_logging

SIZE_UNITS = ["B", "KB", "MB", "GB"]


def format_size(size: int) -> str:
    """Human readable byte count (``1536`` -> ``1.5 KB``)."""
    if size <= 0:
        return "0 B"
    value = float(size)
    for unit in SIZE_UNITS[:-1]:
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} {SIZE_UNITS[-1]}"


def format_age(timestamp: float | None, now: float | None = None) -> str:
    """How long ago ``timestamp`` was (``"3 hours ago"``)."""
    if not timestamp:
        return "Never"
    seconds = (now or time.time()) - timestamp

    if seconds < 3600:
        n, unit = int(seconds // 60), "minute"
    elif seconds < 86400:
        n, unit = int(seconds // 3600), "hour"
    else:
        n, unit = int(seconds // 86400), "day"
    return f"{n} {unit}{'' if n == 1 else 's'} ago"


async def show_info(container: Container) -> None:
    info = await container.cache.cache_info()
    print("\n" + "=" * 40)
    print("CACHE INFO")
    print("=" * 40)
    print(f"  Entries: {info.count:,}")
    print(f"  Size: {format_size(info.approx_bytes)}")
    print(f"  Oldest: {format_age(info.oldest_write)}")
    print(f"  Newest: {format_age(info.newest_write)}")
    print("=" * 40 + "\n")


async def run_edge() -> None:
    conn = connect_edge(EDGE_DB_PATH)
    async with httpx.AsyncHTTPTransport(retries=1) as network:
        buckets = BucketStore(conn)
        interceptor = EdgeCacheInterceptor(buckets, network)
        await interceptor.install()
        await interceptor.activate()
        logger.info("Edge buckets: {}", await buckets.keys())
    conn.close()


async def run(command: str, args: list[str]) -> int:
    if command == "edge":
        await run_edge()
        return 0

    async with Container() as container:
        if command == "warmup":
            state = await container.warmup.run()
            logger.info("Warmup state: {}", state)
            return 0 if state == "done" else 1

        if command == "refresh":
            loaded = await container.cache.preload_all(force_refresh=True)
            logger.info("Refreshed {} resources", loaded)
        elif command == "info":
            await show_info(container)
        elif command == "clear":
            if args:
                for topic in args:
                    try:
                        await container.cache.clear_topic(topic)
                    except UnknownDatasetError as e:
                        logger.error("Cannot clear {}: {}", topic, e)
                        return 1
            else:
                await container.cache.clear_all()
        elif command == "sweep":
            removed = await container.cache.clean_expired()
            logger.info("Removed {} expired entries", removed)
        else:
            print(__doc__)
            return 1
    return 0


def main():
    args = sys.argv[1:]
    if not args:
        print(__doc__)
        sys.exit(1)
    setup_logging(component="edge" if args[0] == "edge" else "cache")
    sys.exit(asyncio.run(run(args[0], args[1:])))


if __name__ == "__main__":
    main()
