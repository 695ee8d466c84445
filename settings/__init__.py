"""Application settings."""

import os
from pathlib import Path

# Database
DB_PATH = os.getenv("VOCAB_DB_PATH", "quickfrench.duckdb")
EDGE_DB_PATH = os.getenv("VOCAB_EDGE_DB_PATH", "quickfrench_edge.duckdb")

# Logging
LOG_DIR = Path(os.getenv("VOCAB_LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("VOCAB_LOG_LEVEL", "INFO")
LOG_RETENTION = "7 days"

# API
API_BASE_URL = os.getenv("VOCAB_API_BASE_URL", "https://quickfrench.app")
API_TIMEOUT = int(os.getenv("VOCAB_API_TIMEOUT", "30"))
API_RETRIES = 3
MAX_CONCURRENT = 8

# Data cache
CACHE_TTL = float(os.getenv("VOCAB_CACHE_TTL", str(24 * 60 * 60)))  # seconds
CACHE_SCHEMA_VERSION = 1

# Warmup - bump to force a one-time re-warm after deployments/data changes
WARMUP_VERSION = os.getenv("VOCAB_WARMUP_VERSION", "1")
WARMUP_MARKER = "quickfrench.cacheWarmupVersion"
WARMUP_RETRY_DELAY = 1.0

# Edge cache
EDGE_CACHE_VERSION = os.getenv("VOCAB_EDGE_VERSION", "2025-08-17T15:30:00")
EDGE_ORIGIN = os.getenv("VOCAB_ORIGIN", API_BASE_URL)
NAVIGATION_TIMEOUT = 6.0
OFFLINE_URL = "/offline.html"
PRECACHE_URLS = [
    "/",
    "/settings",
    OFFLINE_URL,
    "/favicon.ico",
    "/file.svg",
    "/globe.svg",
    "/vercel.svg",
    "/window.svg",
]
