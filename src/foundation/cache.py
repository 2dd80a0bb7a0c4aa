"""Bounded-TTL in-memory cache store.

The discovery layer caches resolved endpoint templates through the small
`CacheStore` protocol defined here. `MemoryCacheStore` implements it on top of
`cachetools.TLRUCache`, which supports a time-to-live per entry.

Entries are advisory: callers must treat a miss as normal and recompute. TTLs
are capped at `MAX_TTL_SECONDS` (6 hours).
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from cachetools import TLRUCache

logger = logging.getLogger("foundation.cache")

MAX_TTL_SECONDS = 21600
DEFAULT_MAX_ENTRIES = 512


@runtime_checkable
class CacheStore(Protocol):
    """Key/value store with per-entry expiry."""

    def get(self, key: str) -> str | None:
        """Return the cached value, or None on a miss or expired entry."""
        ...

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store `value` under `key` for at most `ttl_seconds`."""
        ...


def _entry_expiry(_key: str, entry: tuple[str, float], now: float) -> float:
    return now + entry[1]


class MemoryCacheStore:
    """Thread-safe in-process `CacheStore`.

    Attributes:
        max_ttl_seconds: Upper bound applied to every `put`.

    Example:
        ```python
        store = MemoryCacheStore(max_entries=128)
        store.put("chatv1spacesget", "https://chat.googleapis.com/v1/{name}", 3600)
        store.get("chatv1spacesget")
        ```
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_ttl_seconds: int = MAX_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be greater than 0")
        self.max_ttl_seconds = max_ttl_seconds
        self._entries: TLRUCache = TLRUCache(maxsize=max_entries, ttu=_entry_expiry, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        return entry[0]

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ttl = min(ttl_seconds, self.max_ttl_seconds)
        if ttl <= 0:
            logger.debug("Skipping cache write with non-positive TTL", extra={"key": key})
            return
        with self._lock:
            self._entries[key] = (value, float(ttl))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

