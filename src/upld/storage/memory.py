"""In-process content store.

Same semantics as the SQL store, without durability across restarts. Used
for single-process deployments and as the origin fake in tests.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta


@dataclass
class _Entry:
    value: bytes
    generation: int
    expires_at: float | None

    def live(self, now: float) -> bool:
        return self.expires_at is None or self.expires_at > now


class MemoryContentStore:
    """Dict-backed ``ContentStore``.

    Args:
        clock: Returns the current time in seconds. Tests pass a fake clock
            to drive expiry.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._entries: dict[str, _Entry] = {}
        self._clock = clock

    def _live_entry(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None or not entry.live(self._clock()):
            return None
        return entry

    async def insert(self, key: str, value: bytes, ttl: timedelta | None = None) -> None:
        current = self._live_entry(key)
        expires_at = self._clock() + ttl.total_seconds() if ttl is not None else None
        generation = current.generation + 1 if current else 1
        self._entries[key] = _Entry(bytes(value), generation, expires_at)

    async def append(self, key: str, value: bytes) -> None:
        current = self._live_entry(key)
        if current is None:
            self._entries[key] = _Entry(bytes(value), 1, None)
            return
        current.value += value
        current.generation += 1

    async def lookup(self, key: str) -> bytes | None:
        entry = self._live_entry(key)
        return entry.value if entry else None

    async def generation(self, key: str) -> int:
        entry = self._live_entry(key)
        return entry.generation if entry else 0

    async def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.live(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)
