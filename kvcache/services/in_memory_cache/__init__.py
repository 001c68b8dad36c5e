"""Bounded in-memory cache with least-recently-used eviction."""

from kvcache.services.in_memory_cache.cache_factory import (
    create_cache,
    get_in_memory_cache,
    reset_in_memory_cache
)
from kvcache.services.in_memory_cache.base import BaseCache, EvictionListener
from kvcache.services.in_memory_cache.lru_cache import CacheStats, LRUCache
from kvcache.services.in_memory_cache.eviction_listener import (
    EvictionEvent,
    QueueEvictionListener
)

__all__ = [
    "create_cache",
    "get_in_memory_cache",
    "reset_in_memory_cache",
    "BaseCache",
    "EvictionListener",
    "CacheStats",
    "LRUCache",
    "EvictionEvent",
    "QueueEvictionListener",
]
