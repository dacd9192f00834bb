"""Cache- and rate-limit-aware resource access.

Decision order for a logical resource:
1. A valid cache entry is returned without touching the network or the
   rate limiter.
2. If the rate limiter denies the request, the last cached value is
   returned whatever its age (or None when nothing was ever cached).
3. Otherwise the fetch runs. On success the request is recorded, the value
   cached with the resource TTL and returned.
4. On failure, a previously cached value (even expired) is returned;
   without one the ``DashboardError`` propagates to the caller.

Retries happen inside the fetch itself (see ``HazardAPIClient``), never
around these decisions.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from cyclonewatch.models import DashboardError, ErrorType
from cyclonewatch.services.cache import CacheStore
from cyclonewatch.services.ratelimit import RateLimiter
from cyclonewatch.utils.logging import log_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AccessLayer:
    """Serves logical resources through the cache and rate limiter.

    Args:
        cache: Cache of previously fetched resources.
        limiter: Per-resource request limiter.
        cache_enabled: When False, valid cache entries are not served
            directly; stale fallbacks still apply.
    """

    def __init__(
        self,
        cache: CacheStore,
        limiter: RateLimiter,
        cache_enabled: bool = True,
    ) -> None:
        self._cache = cache
        self._limiter = limiter
        self._cache_enabled = cache_enabled

    @property
    def cache(self) -> CacheStore:
        return self._cache

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    async def fetch_resource(
        self,
        key: str,
        fetch: Callable[[], Awaitable[T]],
        ttl: float,
        limit_key: str | None = None,
    ) -> T | None:
        """Return the resource ``key``, fetching it only when needed.

        Args:
            key: Logical resource name and cache key.
            fetch: Coroutine factory performing the transport call.
            ttl: Cache lifetime in seconds for a freshly fetched value.
            limit_key: Rate-limit key when several cache keys share one
                upstream endpoint; defaults to ``key``.

        Returns:
            The fresh, cached or stale value; None when throttled with an
            empty cache.

        Raises:
            DashboardError: The fetch failed and nothing was cached.
        """
        if self._cache_enabled and self._cache.is_valid(key):
            record = self._cache.get(key)
            if record is not None:
                return record.value

        stale = self._cache.get_stale(key)
        limit_key = limit_key or key

        if not self._limiter.can_make_request(limit_key):
            wait = self._limiter.get_time_until_next_request(limit_key)
            logger.warning(
                f"[ACCESS] Rate limit reached for {key}, serving cached data "
                f"(next request in {wait:.0f}s)"
            )
            return stale.value if stale is not None else None

        try:
            value = await fetch()
        except DashboardError as e:
            error = e
        except Exception as e:
            error = DashboardError(ErrorType.UNKNOWN_ERROR, f"Unexpected error fetching {key}: {e}")
            error.__cause__ = e
        else:
            self._limiter.record_request(limit_key)
            self._cache.set(key, value, ttl)
            return value

        if stale is not None:
            log_error(logger, "AccessLayer.fetch_resource", error, key, level=logging.WARNING)
            logger.warning(f"[ACCESS] Serving stale cache for {key}")
            return stale.value
        log_error(logger, "AccessLayer.fetch_resource", error, key)
        raise error
