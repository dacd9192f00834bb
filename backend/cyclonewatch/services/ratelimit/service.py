"""Sliding-window rate limiter.

Tracks request timestamps per logical endpoint key and allows at most
``max_requests`` inside the trailing ``window_seconds``. Old timestamps are
pruned lazily on every call; there is no background timer.

The limiter never blocks or queues. Callers ask ``can_make_request`` and,
after actually dispatching a request, call ``record_request``.
"""

import logging
import time
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 12
DEFAULT_WINDOW_SECONDS = 60 * 60


class RateLimiter:
    """Per-endpoint sliding-window request counter."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._max_requests = max_requests
        self._window = window_seconds
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window

    def _prune(self, endpoint: str) -> deque[float]:
        timestamps = self._requests.get(endpoint)
        if timestamps is None:
            return deque()
        now = self._clock()
        # Timestamps are appended in order, so expired ones sit at the front
        while timestamps and now - timestamps[0] >= self._window:
            timestamps.popleft()
        if not timestamps:
            del self._requests[endpoint]
        return timestamps

    def can_make_request(self, endpoint: str) -> bool:
        return len(self._prune(endpoint)) < self._max_requests

    def record_request(self, endpoint: str) -> None:
        self._prune(endpoint)
        self._requests.setdefault(endpoint, deque()).append(self._clock())

    def get_remaining_requests(self, endpoint: str) -> int:
        return max(0, self._max_requests - len(self._prune(endpoint)))

    def get_time_until_next_request(self, endpoint: str) -> float:
        """Seconds until a request to ``endpoint`` is allowed (0 if now)."""
        timestamps = self._prune(endpoint)
        if len(timestamps) < self._max_requests:
            return 0.0
        # The oldest request that must age out to get back under the limit
        blocking = timestamps[len(timestamps) - self._max_requests]
        return max(0.0, blocking + self._window - self._clock())

    def reset(self, endpoint: str | None = None) -> None:
        if endpoint is None:
            self._requests.clear()
        else:
            self._requests.pop(endpoint, None)

    def endpoints(self) -> list[str]:
        return list(self._requests)
