"""In-process edge caches."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import timedelta

from cachetools import TLRUCache


@dataclass(frozen=True)
class CacheEntry:
    """A cached copy of a paste, tagged for grouped invalidation."""

    value: bytes
    ttl: float
    tags: frozenset[str]


def _time_to_use(key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl


class MemoryEdgeCache:
    """``EdgeCache`` on a bounded ``TLRUCache`` with a TTL per entry.

    Least recently used entries are evicted once ``maxsize`` entries are
    held, so this tier never grows without bound.
    """

    def __init__(self, maxsize: int = 4096, timer: Callable[[], float] = time.monotonic) -> None:
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=maxsize, ttu=_time_to_use, timer=timer
        )

    async def insert(
        self, key: str, value: bytes, ttl: timedelta, tags: Iterable[str] = ()
    ) -> None:
        self._cache[key] = CacheEntry(bytes(value), ttl.total_seconds(), frozenset(tags))

    async def lookup(self, key: str) -> bytes | None:
        entry = self._cache.get(key)
        return entry.value if entry else None

    async def purge_tag(self, tag: str) -> int:
        self._cache.expire()
        removed = 0
        for key in list(self._cache.keys()):
            entry = self._cache.get(key)
            if entry is not None and tag in entry.tags:
                del self._cache[key]
                removed += 1
        return removed


class NullEdgeCache:
    """Edge cache that never holds anything. Every read goes to the origin."""

    async def insert(
        self, key: str, value: bytes, ttl: timedelta, tags: Iterable[str] = ()
    ) -> None:
        return None

    async def lookup(self, key: str) -> bytes | None:
        return None

    async def purge_tag(self, tag: str) -> int:
        return 0
