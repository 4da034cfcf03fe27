"""Upload counter.

The counter is never stored as a number. Each first-time upload appends an
``<identifier>,<unix seconds>`` line to one well-known key, and the count is
that key's write generation. Nothing reads, increments and writes back a
value, so there is no lost-update window on the counter itself.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime

from upld.config import LIMITS, Limits
from upld.storage.base import ContentStore

logger = logging.getLogger(__name__)


class StatsTracker:
    """Append-only upload log with a derived, monotonic count."""

    def __init__(
        self,
        store: ContentStore,
        limits: Limits = LIMITS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._key = limits.upload_metrics_key
        self._clock = clock

    async def record_upload(self, identifier: str) -> None:
        """Append an upload record for ``identifier`` stamped with the current time."""
        record = f"{identifier},{self._clock()!r}\n"
        await self._store.append(self._key, record.encode("ascii"))

    async def current_count(self) -> int:
        """All-time number of first-time uploads, 0 before any upload."""
        return await self._store.generation(self._key)

    async def history(self, limit: int | None = None) -> list[tuple[str, datetime]]:
        """Parse the upload log, most recent last.

        Malformed records are skipped. Only used for operator tooling; the
        count never depends on the log contents.
        """
        raw = await self._store.lookup(self._key)
        if not raw:
            return []

        entries: list[tuple[str, datetime]] = []
        for line in raw.decode("ascii", errors="replace").splitlines():
            identifier, _, stamp = line.partition(",")
            try:
                uploaded_at = datetime.fromtimestamp(float(stamp), tz=UTC)
            except (ValueError, OverflowError, OSError):
                logger.debug("Skipping malformed upload record: %r", line)
                continue
            entries.append((identifier, uploaded_at))

        if limit is not None:
            return entries[-limit:] if limit > 0 else []
        return entries
