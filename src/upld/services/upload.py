"""Upload orchestration: validate, hash, store once, count once."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from upld.config import LIMITS, Limits
from upld.errors import EmptyBody, TooLarge, TooSmall
from upld.identifier import derive_identifier
from upld.services.stats import StatsTracker
from upld.storage.base import ContentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    identifier: str
    location: str
    created: bool


class UploadService:
    """Handle PUT-style uploads.

    Dedup is a lookup followed by a conditional insert. The pair is not
    atomic: two concurrent first-time uploads of identical bytes can both
    see the key as absent, both write (harmless, the bytes are identical)
    and both append to the upload log, counting that content twice. The
    counter is fire-and-forget, so that double count is tolerated.
    """

    def __init__(
        self,
        store: ContentStore,
        stats: StatsTracker,
        limits: Limits = LIMITS,
        scheme: str = "https",
    ) -> None:
        self._store = store
        self._stats = stats
        self._limits = limits
        self._scheme = scheme

    def validate(self, body: bytes | None) -> bytes:
        """Check body presence and size bounds, in that order."""
        if not body:
            raise EmptyBody()
        if len(body) < self._limits.min_content_size:
            raise TooSmall()
        if len(body) > self._limits.max_content_size:
            raise TooLarge()
        return body

    async def handle_upload(
        self, body: bytes | None, host: str, filename: str | None = None
    ) -> UploadResult:
        """Store ``body`` if new and return the URL it can be fetched from.

        ``filename`` only decorates the returned URL; retrieval ignores it.
        """
        content = self.validate(body)

        identifier = derive_identifier(content, self._limits.id_length)
        key = self._limits.storage_key(identifier)

        created = await self._store.lookup(key) is None
        if created:
            await self._store.insert(key, content, ttl=self._limits.store_ttl)
            await self._stats.record_upload(identifier)

        logger.info("put %s in storage", key)

        location = f"{self._scheme}://{host}/{identifier}"
        if filename:
            location += f"/{filename}"
        return UploadResult(identifier=identifier, location=location, created=created)
