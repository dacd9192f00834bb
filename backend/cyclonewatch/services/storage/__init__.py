"""Persistent, quota-bounded storage for user state."""

from .backends import InMemoryBackend, KeyValueBackend, RedisBackend, StorageBackendError, utf16_size
from .service import (
    CHECKLIST_STATE_KEY,
    KEY_PREFIX,
    LANGUAGE_PREFERENCE_KEY,
    LAST_CYCLONE_KEY,
    MAX_AGE_SECONDS,
    MAX_SIZE_BYTES,
    StorageManager,
    route_key,
)

__all__ = [
    # Backends
    "InMemoryBackend",
    "KeyValueBackend",
    "RedisBackend",
    "StorageBackendError",
    # Manager
    "StorageManager",
    "route_key",
    "utf16_size",
    "CHECKLIST_STATE_KEY",
    "KEY_PREFIX",
    "LANGUAGE_PREFERENCE_KEY",
    "LAST_CYCLONE_KEY",
    "MAX_AGE_SECONDS",
    "MAX_SIZE_BYTES",
]
