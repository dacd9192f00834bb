"""In-memory TTL cache with freshness tiers.

Records are keyed by a logical resource name (``"cyclone"``,
``"districts"``), not by URL. A record is valid while its age is below its
TTL; ``get`` treats an expired record as absent and purges it.

Freshness tiers are a separate, display-oriented classification of a
record's age (15/30/60 minute thresholds) and do not depend on the TTL.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from cyclonewatch.models import FreshnessTier

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]

# Default TTLs in seconds per logical resource
CACHE_TTLS: dict[str, float] = {
    "cyclone": 5 * 60,
    "districts": 5 * 60,
    "updates": 5 * 60,
    "holiday": 5 * 60,
    "risk_summary": 5 * 60,
    "travel_route": 10 * 60,
}

# Age thresholds in seconds for freshness tiers
FRESHNESS_THRESHOLDS = {
    "fresh": 15 * 60,
    "yellow": 30 * 60,
    "orange": 60 * 60,
}


@dataclass(frozen=True)
class CacheRecord(Generic[T]):
    """A cached value with the time it was fetched and its TTL (seconds)."""

    value: T
    fetched_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_valid(self, now: float) -> bool:
        return self.age(now) < self.ttl


class CacheStore:
    """Process-local cache of upstream resources.

    Example:
        >>> cache = CacheStore()
        >>> cache.set("cyclone", {"id": "CYC-1"}, ttl=300)
        >>> cache.get("cyclone").value
        {'id': 'CYC-1'}
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._records: dict[str, CacheRecord[Any]] = {}
        self._clock = clock

    def get(self, key: str) -> CacheRecord[Any] | None:
        """Return the record for ``key`` if it is still valid.

        Expired records are removed and reported as absent.
        """
        record = self._records.get(key)
        if record is None:
            return None
        if not record.is_valid(self._clock()):
            logger.debug(f"[CACHE] Evicting expired entry {key}")
            del self._records[key]
            return None
        return record

    def get_stale(self, key: str) -> CacheRecord[Any] | None:
        """Return the record for ``key`` regardless of its TTL.

        Used only for serve-stale fallbacks; never evicts.
        """
        return self._records.get(key)

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store ``value`` under ``key``, replacing any existing record."""
        self._records[key] = CacheRecord(value=value, fetched_at=self._clock(), ttl=ttl)

    def is_valid(self, key: str) -> bool:
        record = self._records.get(key)
        return record is not None and record.is_valid(self._clock())

    def get_age(self, key: str) -> float | None:
        """Age in seconds of the record for ``key``, or None if absent."""
        record = self._records.get(key)
        if record is None:
            return None
        return record.age(self._clock())

    def get_freshness(self, key: str) -> FreshnessTier:
        """Classify the age of the record for ``key``.

        Absent keys are ``stale-red``.
        """
        age = self.get_age(key)
        if age is None:
            return FreshnessTier.STALE_RED
        if age < FRESHNESS_THRESHOLDS["fresh"]:
            return FreshnessTier.FRESH
        if age < FRESHNESS_THRESHOLDS["yellow"]:
            return FreshnessTier.STALE_YELLOW
        if age < FRESHNESS_THRESHOLDS["orange"]:
            return FreshnessTier.STALE_ORANGE
        return FreshnessTier.STALE_RED

    def clear(self, key: str | None = None) -> None:
        """Remove one entry, or every entry when ``key`` is None."""
        if key is None:
            self._records.clear()
        else:
            self._records.pop(key, None)

    def prune(self, prefix: str = "", max_entries: int | None = None, exclude: str | None = None) -> int:
        """Drop expired records under ``prefix``, then the oldest beyond ``max_entries``.

        ``exclude`` is never dropped.

        Returns:
            Number of records removed.
        """
        now = self._clock()
        matching = [
            (key, record)
            for key, record in self._records.items()
            if key.startswith(prefix) and key != exclude
        ]
        doomed = [key for key, record in matching if not record.is_valid(now)]
        if max_entries is not None:
            live = [(key, record) for key, record in matching if record.is_valid(now)]
            live.sort(key=lambda item: item[1].fetched_at)
            overflow = len(live) - max_entries
            if overflow > 0:
                doomed.extend(key for key, _ in live[:overflow])

        for key in doomed:
            del self._records[key]
        if doomed:
            logger.debug(f"[CACHE] Pruned {len(doomed)} entr{'y' if len(doomed) == 1 else 'ies'} under {prefix!r}")
        return len(doomed)

    def keys(self) -> list[str]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
