"""Storage contracts for the two read tiers.

``ContentStore`` is the durable origin and the only system of record.
``EdgeCache`` is a disposable read-through copy keyed identically; anything
it holds can be rebuilt from the origin.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from typing import Protocol


class ContentStore(Protocol):
    """Durable key/value store with per-key TTL and write generations.

    Every ``insert`` or ``append`` to a key bumps its generation by one,
    starting at 1 for the first write of the key's current lifetime.
    Implementations raise ``BackendFault`` when the backend fails.
    """

    async def insert(self, key: str, value: bytes, ttl: timedelta | None = None) -> None:
        """Write ``value`` under ``key``, replacing any previous value."""
        ...

    async def append(self, key: str, value: bytes) -> None:
        """Append ``value`` to whatever is stored under ``key``."""
        ...

    async def lookup(self, key: str) -> bytes | None:
        """Return the live value under ``key``, or None if absent or expired."""
        ...

    async def generation(self, key: str) -> int:
        """Return the write generation of ``key``, 0 when absent."""
        ...

    async def purge_expired(self) -> int:
        """Physically drop expired entries, returning how many were removed."""
        ...


class EdgeCache(Protocol):
    """Best-effort TTL cache in front of the content store.

    Implementations raise ``CacheFault`` on backend errors; callers must not
    let those abort a request.
    """

    async def insert(
        self, key: str, value: bytes, ttl: timedelta, tags: Iterable[str] = ()
    ) -> None:
        ...

    async def lookup(self, key: str) -> bytes | None:
        ...

    async def purge_tag(self, tag: str) -> int:
        """Invalidate every entry carrying the surrogate ``tag``."""
        ...
