"""Two-tier read path: edge cache first, content store on a miss."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from upld.config import LIMITS, Limits
from upld.errors import CacheFault, NotFound
from upld.identifier import is_identifier
from upld.storage.base import ContentStore, EdgeCache

logger = logging.getLogger(__name__)


class Tier(str, Enum):
    """Which tier answered a retrieval."""

    CACHE = "cache"
    ORIGIN = "origin"


@dataclass(frozen=True)
class Retrieval:
    content: bytes
    tier: Tier


class RetrievalService:
    """Handle GET-style retrievals.

    The edge cache is best effort. Its faults are logged and the request
    falls through to the content store; content store faults propagate.
    """

    def __init__(self, store: ContentStore, cache: EdgeCache, limits: Limits = LIMITS) -> None:
        self._store = store
        self._cache = cache
        self._limits = limits

    async def handle_retrieve(self, identifier: str) -> Retrieval:
        """Return the content stored under ``identifier``.

        Raises:
            NotFound: The identifier has the wrong length, was never uploaded,
                or has expired from both tiers.
        """
        if not is_identifier(identifier, self._limits.id_length):
            raise NotFound()
        key = self._limits.storage_key(identifier)

        cached = await self._cache_lookup(key)
        if cached is not None:
            return Retrieval(content=cached, tier=Tier.CACHE)

        content = await self._store.lookup(key)
        if content is None:
            raise NotFound()

        await self._cache_populate(key, content)
        return Retrieval(content=content, tier=Tier.ORIGIN)

    async def _cache_lookup(self, key: str) -> bytes | None:
        try:
            return await self._cache.lookup(key)
        except CacheFault as e:
            logger.warning("Edge cache lookup failed for %s: %s", key, e)
            return None

    async def _cache_populate(self, key: str, content: bytes) -> None:
        try:
            await self._cache.insert(
                key, content, ttl=self._limits.cache_ttl, tags=[self._limits.surrogate_tag]
            )
        except CacheFault as e:
            logger.warning("Edge cache write failed for %s: %s", key, e)
