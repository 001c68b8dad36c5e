"""Client SDK routing requests to cache nodes using consistent hashing."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Union

import structlog

from kvcache.config import settings
from kvcache.exceptions import (
    ExhaustedRetriesError,
    InvalidArgumentError,
    InvalidConfigurationError,
    NoNodesAvailableError,
    TransportError
)
from kvcache.services.routing import CacheNode, RoutingTable
from kvcache.services.transport import HttpTransport, NodeHealth, Transport

logger = structlog.get_logger()


class LookupStatus(str, Enum):
    """How a read ended."""

    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"  # a node answered that it does not hold the key
    UNREACHABLE = "UNREACHABLE"  # every candidate failed at the transport level


@dataclass(frozen=True)
class LookupResult:
    """Outcome of KeyValueClient.lookup()."""

    status: LookupStatus
    value: Optional[str] = None
    node: Optional[CacheNode] = None
    attempts: int = 0

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND


class KeyValueClient:
    """
    Routes reads and writes to cache nodes, retrying alternates on failure.

    Candidates for a key come from the routing table, primary first, and
    are tried one at a time. Each key lives on exactly one node; there is
    no replication. A write that lands on a fallback node is not visible
    to later reads, because the read stops at the primary's not-found.
    """

    def __init__(
        self,
        node_urls: Optional[Sequence[Union[str, CacheNode]]] = None,
        max_retries: Optional[int] = None,
        virtual_nodes: Optional[int] = None,
        transport: Optional[Transport] = None
    ):
        """
        Args:
            node_urls: Base URLs (or CacheNode instances) of the cache nodes;
                defaults to the configured KVCACHE_NODE_URLS
            max_retries: Maximum candidates tried per operation (at least 1)
            virtual_nodes: Ring positions per node
            transport: Transport to use; defaults to HttpTransport with the
                configured request timeout

        Raises:
            InvalidConfigurationError: If node_urls is empty
        """
        if node_urls is None:
            node_urls = settings.node_urls_list
        if not node_urls:
            raise InvalidConfigurationError("At least one node URL is required")

        if max_retries is None:
            max_retries = settings.max_retries
        if virtual_nodes is None:
            virtual_nodes = settings.virtual_nodes

        self.max_retries = max(1, max_retries)
        self._routing_table: RoutingTable[CacheNode] = RoutingTable(virtual_nodes)
        self._routing_table.add_nodes(self._as_node(url) for url in node_urls)
        self._transport = transport or HttpTransport(timeout_seconds=settings.request_timeout_seconds)

    @staticmethod
    def _as_node(url: Union[str, CacheNode]) -> CacheNode:
        return url if isinstance(url, CacheNode) else CacheNode(url)

    def _candidates(self, key: str) -> List[CacheNode]:
        candidates = self._routing_table.nodes_for_key(key, self.max_retries)
        if not candidates:
            raise NoNodesAvailableError(key)
        return candidates

    def put(self, key: str, value: str) -> CacheNode:
        """
        Store a key on the first candidate node that accepts it.

        Args:
            key: Key to store
            value: Value to store

        Returns:
            The node that accepted the write

        Raises:
            InvalidArgumentError: If key or value is None
            NoNodesAvailableError: If the routing table has no nodes
            ExhaustedRetriesError: If every candidate failed; carries the
                last TransportError
        """
        if key is None:
            raise InvalidArgumentError("key")
        if value is None:
            raise InvalidArgumentError("value")

        last_error: Optional[TransportError] = None
        for attempt, node in enumerate(self._candidates(key), start=1):
            logger.debug("Putting key", key=key, node=str(node), attempt=attempt)
            try:
                self._transport.write(node, key, value)
            except TransportError as e:
                logger.warning("Put attempt failed", key=key, node=str(node), attempt=attempt, error=e.message)
                last_error = e
                continue

            if attempt > 1:
                logger.info("Put succeeded on fallback node", key=key, node=str(node), attempt=attempt)
            return node

        logger.error("Put failed on all candidate nodes", key=key)
        raise ExhaustedRetriesError(key, last_error) from last_error

    def lookup(self, key: str) -> LookupResult:
        """
        Read a key, reporting whether absence was confirmed or only inferred.

        The first node to answer (found or not found) is authoritative.
        Transport failures advance to the next candidate.

        Args:
            key: Key to read

        Returns:
            LookupResult with FOUND, NOT_FOUND or UNREACHABLE status

        Raises:
            InvalidArgumentError: If key is None
            NoNodesAvailableError: If the routing table has no nodes
        """
        if key is None:
            raise InvalidArgumentError("key")

        attempts = 0
        for node in self._candidates(key):
            attempts += 1
            logger.debug("Getting key", key=key, node=str(node), attempt=attempts)
            try:
                result = self._transport.read(node, key)
            except TransportError as e:
                logger.warning("Get attempt failed", key=key, node=str(node), attempt=attempts, error=e.message)
                continue

            if result.found:
                return LookupResult(LookupStatus.FOUND, result.value, node, attempts)
            return LookupResult(LookupStatus.NOT_FOUND, None, node, attempts)

        logger.warning("Get found no reachable node", key=key, attempts=attempts)
        return LookupResult(LookupStatus.UNREACHABLE, attempts=attempts)

    def get(self, key: str) -> Optional[str]:
        """
        Read a key.

        Returns None both when the owning node reports the key missing and
        when no candidate could be reached; use lookup() to tell them apart.

        Args:
            key: Key to read

        Returns:
            The stored value, or None
        """
        return self.lookup(key).value

    def add_node(self, url: Union[str, CacheNode]) -> None:
        """Add a node to the ring; keys now hashing to it move there."""
        self._routing_table.add_node(self._as_node(url))

    def remove_node(self, url: Union[str, CacheNode]) -> None:
        """Remove a node from the ring."""
        self._routing_table.remove_node(self._as_node(url))

    @property
    def nodes(self) -> List[CacheNode]:
        return self._routing_table.nodes

    def nodes_for_key(self, key: str) -> List[CacheNode]:
        """Candidate nodes a request for this key would try, in order."""
        return self._routing_table.nodes_for_key(key, self.max_retries)

    def health(self) -> Dict[str, NodeHealth]:
        """Probe every node. Informational only; routing ignores the result."""
        return {str(node): self._transport.probe(node) for node in self.nodes}

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "KeyValueClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
