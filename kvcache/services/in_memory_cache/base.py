"""Base cache interface for in-memory cache implementations."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional
import threading

from kvcache.exceptions import InvalidConfigurationError

# Called with (key, value) of each evicted entry
EvictionListener = Callable[[Any, Any], None]


class BaseCache(ABC):
    """Abstract base class for bounded cache implementations."""

    def __init__(self, capacity: int, eviction_listener: Optional[EvictionListener] = None):
        """
        Initialize the cache.

        Args:
            capacity: Maximum number of keys the cache can hold
            eviction_listener: Optional callable invoked with (key, value) of
                every entry evicted to make room for a new one

        Raises:
            InvalidConfigurationError: If capacity is not a positive integer
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidConfigurationError(f"capacity must be a positive integer, got {capacity!r}")

        self._capacity = capacity
        self._eviction_listener = eviction_listener
        self._lock = threading.RLock()

    @abstractmethod
    def get(self, key: Any) -> Optional[Any]:
        """
        Get a value from the cache by key.

        Args:
            key: The key to look up

        Returns:
            The value associated with the key, or None if not found
        """
        pass

    @abstractmethod
    def put(self, key: Any, value: Any) -> None:
        """
        Store a key-value pair in the cache.

        Args:
            key: The key to store
            value: The value to store
        """
        pass

    @abstractmethod
    def invalidate_key(self, key: Any) -> bool:
        """
        Remove a key from the cache.

        Args:
            key: The key to remove

        Returns:
            True if the key was present
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all entries from the cache."""
        pass

    @abstractmethod
    def size(self) -> int:
        """
        Get the current number of keys in the cache.

        Returns:
            The number of keys currently in the cache
        """
        pass

    @abstractmethod
    def stats(self) -> Any:
        """Return a snapshot of size, capacity and hit/miss/eviction counters."""
        pass

    @property
    def capacity(self) -> int:
        """Get the maximum number of keys the cache can hold."""
        return self._capacity

    def __len__(self) -> int:
        return self.size()
