"""Shared pytest fixtures for upld tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable, Iterable
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from upld.app import create_app
from upld.errors import CacheFault
from upld.services import RetrievalService, StatsTracker, UploadService
from upld.storage import MemoryContentStore, MemoryEdgeCache


class FakeClock:
    """Manually advanced clock in seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta.total_seconds()


class RecordingEdgeCache(MemoryEdgeCache):
    """Memory edge cache that records traffic and can be made to fail."""

    def __init__(self, timer: Callable[[], float] | None = None) -> None:
        if timer is None:
            super().__init__()
        else:
            super().__init__(timer=timer)
        self.lookups: list[tuple[str, bool]] = []
        self.inserts: list[tuple[str, timedelta, frozenset[str]]] = []
        self.fail_lookups = False
        self.fail_inserts = False

    async def insert(
        self, key: str, value: bytes, ttl: timedelta, tags: Iterable[str] = ()
    ) -> None:
        if self.fail_inserts:
            raise CacheFault("cache write refused")
        self.inserts.append((key, ttl, frozenset(tags)))
        await super().insert(key, value, ttl, tags)

    async def lookup(self, key: str) -> bytes | None:
        if self.fail_lookups:
            raise CacheFault("cache unreachable")
        value = await super().lookup(key)
        self.lookups.append((key, value is not None))
        return value


class CountingContentStore(MemoryContentStore):
    """Memory content store that counts reads."""

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        if clock is None:
            super().__init__()
        else:
            super().__init__(clock=clock)
        self.lookup_calls: list[str] = []

    async def lookup(self, key: str) -> bytes | None:
        self.lookup_calls.append(key)
        return await super().lookup(key)


def payload(size: int, fill: bytes = b"x") -> bytes:
    """Upload body of exactly ``size`` bytes."""
    return (fill * size)[:size]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> CountingContentStore:
    return CountingContentStore(clock=clock)


@pytest.fixture
def cache(clock: FakeClock) -> RecordingEdgeCache:
    return RecordingEdgeCache(timer=clock)


@pytest.fixture
def stats(store: CountingContentStore, clock: FakeClock) -> StatsTracker:
    return StatsTracker(store, clock=clock)


@pytest.fixture
def uploads(store: CountingContentStore, stats: StatsTracker) -> UploadService:
    return UploadService(store, stats)


@pytest.fixture
def retrievals(store: CountingContentStore, cache: RecordingEdgeCache) -> RetrievalService:
    return RetrievalService(store, cache)


@pytest.fixture
async def client(
    store: CountingContentStore, cache: RecordingEdgeCache
) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(store=store, cache=cache)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://upld.test"
    ) as client:
        yield client


MakePayload = Callable[..., bytes]


@pytest.fixture
def make_payload() -> MakePayload:
    """Factory fixture for upload bodies of an exact size."""
    return payload
