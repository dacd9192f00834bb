"""In-memory TTL cache for upstream resources."""

from .service import (
    CACHE_TTLS,
    FRESHNESS_THRESHOLDS,
    CacheRecord,
    CacheStore,
    Clock,
)

__all__ = [
    "CACHE_TTLS",
    "FRESHNESS_THRESHOLDS",
    "CacheRecord",
    "CacheStore",
    "Clock",
]
