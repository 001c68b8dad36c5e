"""Factory for creating cache instances."""

from typing import Optional
import threading

from kvcache.services.in_memory_cache.base import BaseCache, EvictionListener
from kvcache.services.in_memory_cache.lru_cache import LRUCache

DEFAULT_CAPACITY = 1000

# Singleton cache instance
_cache_instance: Optional[BaseCache] = None
_cache_lock = threading.Lock()


def create_cache(capacity: int, eviction_listener: Optional[EvictionListener] = None) -> BaseCache:
    """
    Create an LRU cache instance.

    Args:
        capacity: Maximum number of keys the cache can hold
        eviction_listener: Optional callable invoked with (key, value) on eviction

    Returns:
        A cache instance implementing the BaseCache interface

    Raises:
        InvalidConfigurationError: If capacity is invalid
    """
    return LRUCache(capacity, eviction_listener)


def get_in_memory_cache(
    capacity: Optional[int] = None,
    eviction_listener: Optional[EvictionListener] = None
) -> BaseCache:
    """
    Get the process-wide cache instance served by this node.

    On first call, initializes the cache with the provided parameters.
    On subsequent calls, returns the same instance (parameters are ignored).

    Args:
        capacity: Optional maximum number of keys. Defaults to 1000 if not
            provided on first call.
        eviction_listener: Optional eviction callback, first call only

    Returns:
        The singleton cache instance

    Raises:
        InvalidConfigurationError: If capacity is invalid (only on first call)
    """
    global _cache_instance

    # Double-checked locking pattern for thread-safe singleton
    if _cache_instance is None:
        with _cache_lock:
            if _cache_instance is None:
                if capacity is None:
                    capacity = DEFAULT_CAPACITY
                _cache_instance = create_cache(capacity, eviction_listener)

    return _cache_instance


def reset_in_memory_cache() -> None:
    """Drop the singleton so the next get_in_memory_cache() builds a fresh one."""
    global _cache_instance

    with _cache_lock:
        _cache_instance = None
