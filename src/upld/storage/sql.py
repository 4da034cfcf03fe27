"""Content store backed by SQLAlchemy.

Rows past ``expires_at`` are treated as absent by every read and are only
physically removed by ``purge_expired``. Writes over an expired row start a
fresh lifetime at generation 1.

Every write is a single ``INSERT ... ON CONFLICT DO UPDATE`` statement, so
the database applies generation bumps and appends atomically. Concurrent
writers to the same key never lose an increment and never collide on the
primary key. PostgreSQL and SQLite are supported.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import ColumnElement, LargeBinary, case, cast, delete, func, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from upld.errors import BackendFault
from upld.models import StoreEntry

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _live(now: datetime) -> ColumnElement[bool]:
    return or_(StoreEntry.expires_at.is_(None), StoreEntry.expires_at > now)


def _upsert(session: AsyncSession) -> Any:
    """Dialect-specific ``insert`` construct supporting ``on_conflict_do_update``."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert(StoreEntry)
    return postgresql.insert(StoreEntry)


class SqlContentStore:
    """``ContentStore`` over a ``store_entries`` table.

    Usage:
        store = SqlContentStore(async_session_factory)
        await store.insert("file_abcdefgh", content, ttl=timedelta(days=7))
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, translating driver failures into ``BackendFault``."""
        try:
            async with self._session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error("Content store failure: %s", e)
            raise BackendFault() from e

    async def insert(self, key: str, value: bytes, ttl: timedelta | None = None) -> None:
        now = self._clock()
        expires_at = now + ttl if ttl is not None else None
        async with self._session() as session:
            stmt = _upsert(session).values(
                key=key, value=value, generation=1, expires_at=expires_at
            )
            # Last writer wins; the generation only carries over from a live row
            stmt = stmt.on_conflict_do_update(
                index_elements=[StoreEntry.key],
                set_={
                    "value": stmt.excluded.value,
                    "generation": case((_live(now), StoreEntry.generation + 1), else_=1),
                    "expires_at": stmt.excluded.expires_at,
                    "updated_at": func.now(),
                },
            )
            await session.execute(stmt)
            await session.commit()

    async def append(self, key: str, value: bytes) -> None:
        now = self._clock()
        async with self._session() as session:
            stmt = _upsert(session).values(key=key, value=value, generation=1, expires_at=None)
            live = _live(now)
            stmt = stmt.on_conflict_do_update(
                index_elements=[StoreEntry.key],
                set_={
                    "value": case(
                        (live, cast(StoreEntry.value.concat(stmt.excluded.value), LargeBinary)),
                        else_=stmt.excluded.value,
                    ),
                    "generation": case((live, StoreEntry.generation + 1), else_=1),
                    "expires_at": case((live, StoreEntry.expires_at), else_=None),
                    "updated_at": func.now(),
                },
            )
            await session.execute(stmt)
            await session.commit()

    async def lookup(self, key: str) -> bytes | None:
        async with self._session() as session:
            stmt = select(StoreEntry.value).where(StoreEntry.key == key, _live(self._clock()))
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def generation(self, key: str) -> int:
        async with self._session() as session:
            stmt = select(StoreEntry.generation).where(
                StoreEntry.key == key, _live(self._clock())
            )
            result = await session.execute(stmt)
            return result.scalar_one_or_none() or 0

    async def purge_expired(self) -> int:
        async with self._session() as session:
            stmt = delete(StoreEntry).where(StoreEntry.expires_at <= self._clock())
            result = await session.execute(stmt)
            await session.commit()
        removed = result.rowcount or 0
        logger.info("Purged %d expired entries", removed)
        return removed
