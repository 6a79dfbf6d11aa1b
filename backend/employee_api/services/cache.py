"""
In-process cache for upstream reads.

Each entry carries the time it was last refreshed. Entries expire after a TTL
(cachetools.TTLCache) and can be dropped explicitly with `invalidate()`.
Concurrent misses on the same key share one refresh: only the first caller
runs the loader, the others wait on the per-key lock and read its result.
A refresh that overlaps an invalidation of its key returns its value but
does not store it.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Optional, TypeVar

from cachetools import TTLCache

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    value: V
    refreshed_at: float


class RefreshingCache(Generic[V]):
    def __init__(
        self,
        ttl_seconds: float,
        maxsize: int = 16,
        timer: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ) -> None:
        self.name = name
        self.ttl_seconds = float(ttl_seconds)
        self._timer = timer
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=self.ttl_seconds, timer=timer)
        self._lock = threading.Lock()
        self._key_locks: dict[Hashable, threading.Lock] = {}
        # bumped by invalidate(); a refresh that spans a bump is not stored
        self._generations: dict[Hashable, int] = {}
        self._epoch = 0

    def _key_lock(self, key: Hashable) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock

    def _generation(self, key: Hashable) -> tuple[int, int]:
        # caller holds self._lock
        return self._epoch, self._generations.get(key, 0)

    def get_entry(self, key: Hashable) -> Optional[CacheEntry[V]]:
        with self._lock:
            return self._entries.get(key)

    def get_or_refresh(self, key: Hashable, loader: Callable[[], V]) -> V:
        entry = self.get_entry(key)
        if entry is not None:
            return entry.value

        with self._key_lock(key):
            # Another thread may have refreshed while we waited.
            with self._lock:
                entry = self._entries.get(key)
                started = self._generation(key)
            if entry is not None:
                return entry.value

            logger.info(f"[CACHE] {self.name}: miss for key={key!r}, refreshing")
            value = loader()
            with self._lock:
                if self._generation(key) != started:
                    # Invalidated mid-refresh: the loaded value may predate the write.
                    logger.info(f"[CACHE] {self.name}: key={key!r} invalidated during refresh, not storing")
                    return value
                self._entries[key] = CacheEntry(value=value, refreshed_at=self._timer())
            return value

    def invalidate(self, key: Hashable | None = None) -> None:
        """Drop one key, or everything when `key` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
                self._epoch += 1
            else:
                self._entries.pop(key, None)
                self._generations[key] = self._generations.get(key, 0) + 1
        logger.info(f"[CACHE] {self.name}: invalidated {'all keys' if key is None else repr(key)}")
