"""LRU (Least Recently Used) cache implementation."""

from dataclasses import dataclass
from typing import Any, Optional

from kvcache.exceptions import InvalidArgumentError
from kvcache.services.in_memory_cache.base import BaseCache, EvictionListener


class Node:
    """Node for doubly linked list in LRU cache."""

    __slots__ = ("key", "value", "prev", "next")

    def __init__(self, key: Any, value: Any):
        self.key = key
        self.value = value
        self.prev: Optional['Node'] = None
        self.next: Optional['Node'] = None


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time counters for a cache instance."""

    size: int
    capacity: int
    hits: int
    misses: int
    evictions: int


class LRUCache(BaseCache):
    """
    Thread-safe LRU (Least Recently Used) cache implementation.

    Uses a hash map for O(1) key lookup and a doubly linked list
    to maintain access order for O(1) eviction.

    get() reorders the list, so every operation takes the same exclusive
    lock. The eviction listener runs while that lock is held: it must not
    block for long and must not call back into this cache.
    """

    def __init__(self, capacity: int, eviction_listener: Optional[EvictionListener] = None):
        """
        Initialize LRU cache.

        Args:
            capacity: Maximum number of keys the cache can hold
            eviction_listener: Optional callable invoked with (key, value) of
                each evicted entry
        """
        super().__init__(capacity, eviction_listener)
        self._cache: dict[Any, Node] = {}
        # Dummy head and tail nodes; head side is most recently used
        self._head = Node(None, None)
        self._tail = Node(None, None)
        self._head.next = self._tail
        self._tail.prev = self._head
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: Any) -> Optional[Any]:
        """
        Get a value from the cache by key.

        Moves the accessed node to the head (most recently used).

        Args:
            key: The key to look up

        Returns:
            The value associated with the key, or None if not found

        Raises:
            InvalidArgumentError: If key is None
        """
        if key is None:
            raise InvalidArgumentError("key")

        with self._lock:
            node = self._cache.get(key)
            if node is None:
                self._misses += 1
                return None

            self._move_to_head(node)
            self._hits += 1
            return node.value

    def put(self, key: Any, value: Any) -> None:
        """
        Store a key-value pair in the cache.

        If key exists, updates value and moves to head.
        If key doesn't exist, adds a new node at the head and, when the
        cache has grown past capacity, evicts the tail node.

        Args:
            key: The key to store
            value: The value to store

        Raises:
            InvalidArgumentError: If key or value is None
        """
        if key is None:
            raise InvalidArgumentError("key")
        if value is None:
            raise InvalidArgumentError("value")

        with self._lock:
            node = self._cache.get(key)
            if node is not None:
                node.value = value
                self._move_to_head(node)
                return

            node = Node(key, value)
            self._cache[key] = node
            self._add_to_head(node)

            if len(self._cache) > self._capacity:
                self._evict_lru()

    def invalidate_key(self, key: Any) -> bool:
        """
        Remove a key from the cache without notifying the eviction listener.

        Args:
            key: The key to remove

        Returns:
            True if the key was present
        """
        if key is None:
            raise InvalidArgumentError("key")

        with self._lock:
            node = self._cache.pop(key, None)
            if node is None:
                return False
            self._remove_node(node)
            return True

    def clear(self) -> None:
        """Clear all entries from the cache."""
        with self._lock:
            self._cache.clear()
            self._head.next = self._tail
            self._tail.prev = self._head

    def size(self) -> int:
        """
        Get the current number of keys in the cache.

        Returns:
            The number of keys currently in the cache
        """
        with self._lock:
            return len(self._cache)

    def keys(self) -> list:
        """Return keys ordered from most to least recently used."""
        with self._lock:
            result = []
            node = self._head.next
            while node is not self._tail:
                result.append(node.key)
                node = node.next
            return result

    def stats(self) -> CacheStats:
        """Return hit/miss/eviction counters."""
        with self._lock:
            return CacheStats(
                size=len(self._cache),
                capacity=self._capacity,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
            )

    def __contains__(self, key: Any) -> bool:
        # Membership test does not touch recency
        with self._lock:
            return key in self._cache

    def _add_to_head(self, node: Node) -> None:
        """
        Insert a node right after the head sentinel.

        Args:
            node: The node to insert
        """
        node.prev = self._head
        node.next = self._head.next
        self._head.next.prev = node
        self._head.next = node

    def _move_to_head(self, node: Node) -> None:
        """
        Move a node to the head of the linked list (most recently used).

        Args:
            node: The node to move
        """
        if self._head.next is node:
            return
        self._remove_node(node)
        self._add_to_head(node)

    def _remove_node(self, node: Node) -> None:
        """
        Unlink a node from the linked list.

        Args:
            node: The node to remove
        """
        node.prev.next = node.next
        node.next.prev = node.prev
        node.prev = None
        node.next = None

    def _evict_lru(self) -> None:
        """Evict the least recently used item (tail of the list)."""
        lru_node = self._tail.prev
        if lru_node is self._head:
            return

        self._remove_node(lru_node)
        del self._cache[lru_node.key]
        self._evictions += 1

        # Entry is fully unlinked; a failing listener cannot undo the eviction
        if self._eviction_listener is not None:
            self._eviction_listener(lru_node.key, lru_node.value)
