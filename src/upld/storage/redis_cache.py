"""Edge cache backed by Redis.

Values live under the same key as in the content store. Each surrogate tag
is a Redis set ``tag:<tag>`` listing the keys that carry it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import timedelta

import redis.asyncio as redis
from redis.exceptions import RedisError

from upld.errors import CacheFault

logger = logging.getLogger(__name__)


def _tag_key(tag: str) -> str:
    return f"tag:{tag}"


class RedisEdgeCache:
    """``EdgeCache`` over a shared Redis instance."""

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisEdgeCache:
        return cls(redis.from_url(url))

    async def insert(
        self, key: str, value: bytes, ttl: timedelta, tags: Iterable[str] = ()
    ) -> None:
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.set(key, value, ex=int(ttl.total_seconds()))
                for tag in tags:
                    pipe.sadd(_tag_key(tag), key)
                await pipe.execute()
        except RedisError as e:
            raise CacheFault(f"redis insert of {key} failed: {e}") from e

    async def lookup(self, key: str) -> bytes | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise CacheFault(f"redis lookup of {key} failed: {e}") from e

    async def purge_tag(self, tag: str) -> int:
        try:
            keys = await self._redis.smembers(_tag_key(tag))
            if not keys:
                return 0
            removed = await self._redis.delete(*keys)
            await self._redis.delete(_tag_key(tag))
        except RedisError as e:
            raise CacheFault(f"redis purge of tag {tag} failed: {e}") from e
        logger.info("Purged %d cache entries tagged %s", removed, tag)
        return removed

    async def close(self) -> None:
        await self._redis.aclose()
