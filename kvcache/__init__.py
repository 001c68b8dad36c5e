"""kvcache: sharded in-memory cache nodes and a consistent-hashing client."""

from kvcache.services.kv_client import KeyValueClient, LookupResult, LookupStatus
from kvcache.services.in_memory_cache import LRUCache
from kvcache.services.routing import CacheNode, HashRing, RoutingTable

__all__ = [
    "KeyValueClient",
    "LookupResult",
    "LookupStatus",
    "LRUCache",
    "CacheNode",
    "HashRing",
    "RoutingTable",
]
