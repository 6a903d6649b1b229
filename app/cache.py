from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 5 * 60


def cache_key(operation: str, *parts: object) -> str:
    """Build a key like ``price_1_2025-07-01_2025-07-08``."""
    return "_".join([operation, *(str(p) for p in parts)])


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    timestamp: float


class ResultCache:
    """Short-lived memoization for backend lookups.

    Entries are replaced wholesale, never updated in place. Concurrent misses
    on the same key may both compute; the last write wins.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._ttl = ttl_seconds
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp >= self._ttl

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Evicted %d expired cache entries", len(expired))

    def get(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            self._entries.pop(key, None)
            return None
        return entry

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        self._evict_expired(now)
        self._entries[key] = CacheEntry(value=value, timestamp=now)

    async def get_or_compute(
        self, key: str, producer: Callable[[], Awaitable[T]]
    ) -> T:
        if entry := self.get(key):
            logger.debug("Cache hit for %s", key)
            return entry.value

        # Nothing is stored when the producer raises.
        value = await producer()
        self.set(key, value)
        return value

    def invalidate(self, pattern: str | None = None) -> int:
        if pattern is None:
            removed = len(self._entries)
            self._entries.clear()
        else:
            keys = [k for k in self._entries if pattern in k]
            for key in keys:
                del self._entries[key]
            removed = len(keys)

        logger.info("Invalidated %d cache entries (pattern=%r)", removed, pattern)
        return removed
