"""Consistent-hash routing of keys to cache nodes."""

from kvcache.services.routing.cache_node import CacheNode
from kvcache.services.routing.hash_ring import HashRing, hash_key
from kvcache.services.routing.routing_table import RoutingTable

__all__ = [
    "CacheNode",
    "HashRing",
    "hash_key",
    "RoutingTable",
]
