"""
A time-to-live (TTL) cache for storing API responses, optionally mirrored
to the local key-value storage so it survives between runs.
Tracks hits and misses for diagnostics.
"""

import json
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urlencode

from otakutrack.exceptions import StorageError
from otakutrack.models.config import STORAGE_KEYS

log = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


class CacheStore:
    """
    Memoizes request payloads for a fixed freshness window.

    A stale entry is reported as a miss but left in place; the next `put`
    for the same key overwrites it. There is no other eviction.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] | None = None,
        storage=None,
        stats_callback: Callable[[bool], None] | None = None,
    ):
        """
        Initializes the cache.

        Args:
            ttl_seconds: How long an entry stays fresh after it is stored.
            clock: Source of the current time in seconds. Defaults to
            `time.monotonic`, or `time.time` when entries are persisted.
            storage: Optional key-value storage to mirror entries into.
            stats_callback: Optional callback to report cache hits (True) or misses
            (False).
        """
        self.ttl_seconds = ttl_seconds
        if clock is None:
            clock = time.time if storage is not None else time.monotonic
        self._clock = clock
        self._storage = storage
        self._stats_callback = stats_callback
        self._entries: dict[str, tuple[Any, float]] = {}
        self.hits = 0
        self.misses = 0

        if self._storage is not None:
            self._load()

    @staticmethod
    def make_key(endpoint: str, params: Mapping[str, Any] | None = None) -> str:
        """
        Derives the cache key for a request.

        Parameters are sorted by name and None values are dropped, so the
        same logical request always maps to the same key.
        """
        items = sorted(
            (str(k), str(v)) for k, v in (params or {}).items() if v is not None
        )
        if not items:
            return endpoint
        return f"{endpoint}?{urlencode(items)}"

    def _load(self) -> None:
        """Reads persisted entries. Unreadable data starts an empty cache."""
        try:
            raw = self._storage.get_item(STORAGE_KEYS["cache"])
            if not raw:
                return
            payload = json.loads(raw)
            now = self._clock()
            entries = {
                key: (item["value"], float(item["timestamp"]))
                for key, item in payload.items()
            }
            # Entries that went stale since the last run are not carried over
            self._entries = {
                key: entry
                for key, entry in entries.items()
                if now - entry[1] < self.ttl_seconds
            }
            log.debug(f"Loaded {len(self._entries)} cached responses.")
        except (StorageError, ValueError, TypeError, KeyError, AttributeError) as e:
            log.debug(f"Ignoring unreadable response cache: {e}")
            self._entries = {}

    def _flush(self) -> None:
        try:
            payload = {
                key: {"value": value, "timestamp": stored_at}
                for key, (value, stored_at) in self._entries.items()
            }
            self._storage.set_item(STORAGE_KEYS["cache"], json.dumps(payload))
        except (StorageError, TypeError, ValueError) as e:
            log.warning(f"Cache write failed: {e}")

    def _record(self, hit: bool) -> None:
        if hit:
            self.hits += 1
        else:
            self.misses += 1
        if self._stats_callback:
            self._stats_callback(hit)

    def get(self, key: str) -> Any | None:
        """
        Retrieves a value from the cache. Returns None if the key is not found or
        expired.
        """
        entry = self._entries.get(key)
        if entry is None:
            self._record(False)
            return None

        value, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            log.debug(f"Cache entry for '{key}' is stale.")
            self._record(False)
            return None

        self._record(True)
        return value

    def put(self, key: str, value: Any) -> None:
        """Stores `value` under `key`, stamped with the current time."""
        self._entries[key] = (value, self._clock())
        if self._storage is not None:
            self._flush()

    def clear(self) -> int:
        """Removes all items from the cache and returns how many there were."""
        count = len(self._entries)
        self._entries.clear()
        if self._storage is not None:
            try:
                self._storage.remove_item(STORAGE_KEYS["cache"])
            except StorageError as e:
                log.error(f"Failed to clear cache: {e}")
        log.debug(f"Cleared {count} cache entries.")
        return count

    def __len__(self) -> int:
        return len(self._entries)
