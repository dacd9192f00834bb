"""Key/value backends for the persistent store.

The store only needs synchronous get/set/remove by string key plus key
enumeration. ``InMemoryBackend`` serves tests and single-process use;
``RedisBackend`` persists across restarts. Backends signal failures by
raising :class:`StorageBackendError`.
"""

from abc import ABC, abstractmethod
from typing import Iterator

import redis


def utf16_size(value: str) -> int:
    """Byte size of ``value`` in UTF-16 (2 bytes per code unit)."""
    return len(value.encode("utf-16-le"))


class StorageBackendError(Exception):
    """A read or write against the host key/value store failed."""


class KeyValueBackend(ABC):
    """Abstract synchronous string key/value store."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key`` if present."""

    @abstractmethod
    def keys(self, prefix: str = "") -> Iterator[str]:
        """Iterate over stored keys starting with ``prefix``."""


class InMemoryBackend(KeyValueBackend):
    """Dict-backed store.

    Args:
        capacity_bytes: Optional hard limit on the UTF-16 size of all values,
            mimicking a host quota. Writes beyond it raise
            StorageBackendError.
    """

    def __init__(self, capacity_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._capacity = capacity_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._capacity is not None:
            used = sum(utf16_size(v) for k, v in self._items.items() if k != key)
            if used + utf16_size(value) > self._capacity:
                raise StorageBackendError(f"Quota exceeded writing {key}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self, prefix: str = "") -> Iterator[str]:
        return iter([k for k in self._items if k.startswith(prefix)])


class RedisBackend(KeyValueBackend):
    """Redis-based backend using the synchronous client.

    Attributes:
        _client: The Redis client instance.
    """

    def __init__(self, redis_url: str = "redis://localhost:6379") -> None:
        self._redis_url = redis_url
        self._client = redis.Redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
        )

    def get_item(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except redis.RedisError as e:
            raise StorageBackendError(f"Redis GET {key} failed: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            self._client.set(key, value)
        except redis.RedisError as e:
            raise StorageBackendError(f"Redis SET {key} failed: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as e:
            raise StorageBackendError(f"Redis DEL {key} failed: {e}") from e

    def keys(self, prefix: str = "") -> Iterator[str]:
        # SCAN rather than KEYS so large databases are not blocked
        try:
            return iter(list(self._client.scan_iter(match=f"{prefix}*", count=100)))
        except redis.RedisError as e:
            raise StorageBackendError(f"Redis SCAN {prefix}* failed: {e}") from e

    def close(self) -> None:
        self._client.close()
