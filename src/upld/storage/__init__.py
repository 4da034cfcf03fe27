"""Storage tiers for upld.

Main entry point:
    from upld.storage import build_content_store, build_edge_cache

    store = build_content_store(settings)
    cache = build_edge_cache(settings)
"""

from upld.config import Settings
from upld.storage.base import ContentStore, EdgeCache
from upld.storage.cache import MemoryEdgeCache, NullEdgeCache
from upld.storage.memory import MemoryContentStore
from upld.storage.redis_cache import RedisEdgeCache
from upld.storage.sql import SqlContentStore


def build_content_store(settings: Settings) -> ContentStore:
    """Build the configured origin store."""
    if settings.content_store == "memory":
        return MemoryContentStore()

    from upld.db import async_session_factory

    return SqlContentStore(async_session_factory)


def build_edge_cache(settings: Settings) -> EdgeCache:
    """Build the configured edge cache."""
    if settings.edge_cache == "redis":
        return RedisEdgeCache.from_url(settings.redis_url)
    if settings.edge_cache == "none":
        return NullEdgeCache()
    return MemoryEdgeCache(maxsize=settings.edge_cache_max_entries)


__all__ = [
    "ContentStore",
    "EdgeCache",
    "MemoryContentStore",
    "MemoryEdgeCache",
    "NullEdgeCache",
    "RedisEdgeCache",
    "SqlContentStore",
    "build_content_store",
    "build_edge_cache",
]
