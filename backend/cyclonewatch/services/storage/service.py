"""Persistent store for user convenience state.

Holds the last viewed cyclone, saved travel routes, checklist progress and
the language preference. Every value is wrapped as
``{"data": payload, "timestamp": stored_at}`` and written as JSON under the
``cyclone_`` key namespace.

Invariants:
- Records older than ``max_age_seconds`` (30 days) are deleted on read.
- After a route or checklist write, if the namespaced UTF-16 size exceeds
  ``max_size_bytes`` (5 MB), the oldest records are deleted one at a time
  until it no longer does.
- The language preference never expires and is never evicted.

Persistence is best-effort: backend failures, serialization errors and
corrupt records are logged and surface as ``False``, None or a default
value. Nothing here raises to the caller.
"""

import hashlib
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, NamedTuple, get_args

from pydantic import ValidationError

from cyclonewatch.models import ChecklistState, Language, SavedRoute
from cyclonewatch.services.storage.backends import KeyValueBackend, StorageBackendError, utf16_size
from cyclonewatch.utils.logging import log_error

logger = logging.getLogger(__name__)

MAX_AGE_SECONDS = 30 * 24 * 60 * 60
MAX_SIZE_BYTES = 5 * 1024 * 1024

KEY_PREFIX = "cyclone_"
LAST_CYCLONE_KEY = "cyclone_last_viewed"
CHECKLIST_STATE_KEY = "cyclone_checklist_state"
LANGUAGE_PREFERENCE_KEY = "cyclone_language_preference"
ROUTE_KEY_PREFIX = "cyclone_saved_route:"

EXEMPT_KEYS = frozenset({LANGUAGE_PREFERENCE_KEY})

# Exceptions that mean "storage failed", as opposed to programming errors
STORAGE_FAILURES = (StorageBackendError, TypeError, ValueError)


class StoredRecord(NamedTuple):
    data: Any
    timestamp: float


def route_key(source: str, destination: str) -> str:
    """Storage key for the route between ``source`` and ``destination``."""
    digest = hashlib.sha1(json.dumps([source, destination]).encode("utf-8")).hexdigest()
    return f"{ROUTE_KEY_PREFIX}{digest}"


def _decode(raw: str) -> StoredRecord | None:
    try:
        stored = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(stored, dict) or "data" not in stored:
        return None
    timestamp = stored.get("timestamp")
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        return None
    return StoredRecord(stored["data"], float(timestamp))


class StorageManager:
    """Synchronous, quota-bounded persistence over a key/value backend.

    Args:
        backend: Host key/value store.
        clock: Source of wall-clock time in seconds.
        max_age_seconds: Age after which non-exempt records are invalid.
        max_size_bytes: Total namespaced size enforced after route and
            checklist writes.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        clock: Callable[[], float] = time.time,
        max_age_seconds: float = MAX_AGE_SECONDS,
        max_size_bytes: int = MAX_SIZE_BYTES,
    ) -> None:
        self._backend = backend
        self._clock = clock
        self._max_age = max_age_seconds
        self._max_size = max_size_bytes

    @property
    def max_size_bytes(self) -> int:
        return self._max_size

    # ── Generic record operations ─────────────────────────────────────

    def save(self, key: str, payload: Any) -> bool:
        """Wrap ``payload`` with the current time and write it.

        Returns:
            True if the write succeeded, False otherwise.
        """
        try:
            raw = json.dumps({"data": payload, "timestamp": self._clock()})
            self._backend.set_item(key, raw)
            return True
        except STORAGE_FAILURES as e:
            log_error(logger, "StorageManager.save", e, key)
            return False

    def _read(self, key: str) -> StoredRecord | None:
        try:
            raw = self._backend.get_item(key)
        except StorageBackendError as e:
            log_error(logger, "StorageManager.get", e, key)
            return None
        if raw is None:
            return None

        stored = _decode(raw)
        if stored is None:
            logger.warning(f"[STORAGE] Unparsable record under {key}")
            return None

        if key not in EXEMPT_KEYS and self._is_expired(stored.timestamp):
            logger.info(f"[STORAGE] Dropping expired record {key}")
            self.delete(key)
            return None
        return stored

    def get(self, key: str) -> Any | None:
        """Return the payload stored under ``key``.

        Missing, corrupt and expired records all read as None.
        """
        stored = self._read(key)
        return stored.data if stored is not None else None

    def delete(self, key: str) -> bool:
        try:
            self._backend.remove_item(key)
            return True
        except StorageBackendError as e:
            log_error(logger, "StorageManager.delete", e, key)
            return False

    def clear_older_than(self, max_age_seconds: float | None = None) -> int:
        """Delete non-exempt records older than ``max_age_seconds``.

        Corrupt records are deleted too.

        Returns:
            Number of records removed.
        """
        max_age = self._max_age if max_age_seconds is None else max_age_seconds
        removed = 0
        try:
            for key in self._namespaced_keys():
                if key in EXEMPT_KEYS:
                    continue
                raw = self._backend.get_item(key)
                if raw is None:
                    continue
                stored = _decode(raw)
                if stored is None or self._is_expired(stored.timestamp, max_age):
                    self._backend.remove_item(key)
                    removed += 1
        except StorageBackendError as e:
            log_error(logger, "StorageManager.clear_older_than", e)
        if removed:
            logger.info(f"[STORAGE] Cleared {removed} stale record(s)")
        return removed

    def clear_all(self) -> bool:
        """Delete every namespaced record, exempt ones included."""
        try:
            for key in self._namespaced_keys():
                self._backend.remove_item(key)
            return True
        except StorageBackendError as e:
            log_error(logger, "StorageManager.clear_all", e)
            return False

    def get_total_size(self) -> int:
        """UTF-16 byte size of all namespaced values."""
        total = 0
        try:
            for key in self._namespaced_keys():
                raw = self._backend.get_item(key)
                if raw is not None:
                    total += utf16_size(raw)
        except StorageBackendError as e:
            log_error(logger, "StorageManager.get_total_size", e)
            return 0
        return total

    def enforce_quota(self) -> int:
        """Evict the oldest non-exempt records until under the size quota.

        Returns:
            Number of records evicted.
        """
        try:
            total = self.get_total_size()
            if total <= self._max_size:
                return 0

            candidates: list[tuple[float, str, int]] = []
            for key in self._namespaced_keys():
                if key in EXEMPT_KEYS:
                    continue
                raw = self._backend.get_item(key)
                if raw is None:
                    continue
                size = utf16_size(raw)
                stored = _decode(raw)
                if stored is None:
                    self._backend.remove_item(key)
                    total -= size
                    continue
                candidates.append((stored.timestamp, key, size))

            candidates.sort(key=lambda candidate: candidate[0])

            evicted = 0
            for _, key, size in candidates:
                if total <= self._max_size:
                    break
                self._backend.remove_item(key)
                total -= size
                evicted += 1
        except StorageBackendError as e:
            log_error(logger, "StorageManager.enforce_quota", e)
            return 0

        logger.info(f"[STORAGE] Quota exceeded, evicted {evicted} record(s), {total} bytes remain")
        return evicted

    def _namespaced_keys(self) -> list[str]:
        return list(self._backend.keys(KEY_PREFIX))

    def _is_expired(self, timestamp: float, max_age: float | None = None) -> bool:
        limit = self._max_age if max_age is None else max_age
        return self._clock() - timestamp > limit

    # ── Last viewed cyclone ───────────────────────────────────────────

    def save_last_cyclone(self, cyclone_id: str) -> bool:
        return self.save(LAST_CYCLONE_KEY, cyclone_id)

    def get_last_cyclone(self) -> str | None:
        value = self.get(LAST_CYCLONE_KEY)
        return value if isinstance(value, str) else None

    # ── Saved routes ──────────────────────────────────────────────────

    def save_route(self, route: SavedRoute) -> bool:
        """Save ``route``, replacing any route with the same endpoints."""
        key = route_key(route.source, route.destination)
        saved = self.save(key, route.model_dump(mode="json", by_alias=True))
        self.enforce_quota()
        return saved

    def get_saved_routes(self) -> list[SavedRoute]:
        """All saved routes, oldest save first."""
        try:
            keys = [k for k in self._namespaced_keys() if k.startswith(ROUTE_KEY_PREFIX)]
        except StorageBackendError as e:
            log_error(logger, "StorageManager.get_saved_routes", e)
            return []

        records: list[tuple[float, SavedRoute]] = []
        for key in keys:
            stored = self._read(key)
            if stored is None:
                continue
            try:
                records.append((stored.timestamp, SavedRoute.model_validate(stored.data)))
            except ValidationError:
                logger.warning(f"[STORAGE] Ignoring malformed route under {key}")
        records.sort(key=lambda record: record[0])
        return [route for _, route in records]

    def delete_route(self, route_id: str) -> bool:
        """Delete the saved route with ``route_id``.

        Returns:
            True if a route was removed.
        """
        for route in self.get_saved_routes():
            if route.id == route_id:
                return self.delete(route_key(route.source, route.destination))
        return False

    # ── Checklist ─────────────────────────────────────────────────────

    def save_checklist_state(self, state: ChecklistState) -> bool:
        saved = self.save(CHECKLIST_STATE_KEY, state.model_dump(mode="json", by_alias=True))
        self.enforce_quota()
        return saved

    def get_checklist_state(self) -> ChecklistState:
        """Saved checklist progress, or an empty checklist."""
        value = self.get(CHECKLIST_STATE_KEY)
        if value is not None:
            try:
                return ChecklistState.model_validate(value)
            except ValidationError:
                logger.warning("[STORAGE] Ignoring malformed checklist state")
        return ChecklistState(items={}, last_updated=datetime.fromtimestamp(self._clock(), tz=timezone.utc))

    # ── Language preference ───────────────────────────────────────────

    def save_language_preference(self, language: Language) -> bool:
        return self.save(LANGUAGE_PREFERENCE_KEY, language)

    def get_language_preference(self) -> Language | None:
        value = self.get(LANGUAGE_PREFERENCE_KEY)
        return value if value in get_args(Language) else None
