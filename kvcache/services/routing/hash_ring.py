"""Consistent hash ring with virtual nodes."""

import bisect
import hashlib
import threading
from typing import Dict, Generic, Hashable, List, NamedTuple, Optional, Tuple, TypeVar

import structlog

from kvcache.exceptions import InvalidConfigurationError

logger = structlog.get_logger()

NodeT = TypeVar("NodeT", bound=Hashable)

_SIGN_MASK = 0x7FFFFFFFFFFFFFFF


def hash_key(value: str) -> int:
    """
    Map a string to a ring position.

    Uses the leading 8 bytes of a BLAKE2b digest (big-endian) with the sign
    bit cleared, so the result is a non-negative 63-bit integer. BLAKE2b is
    always compiled into hashlib, so placement is identical on every runtime.

    Args:
        value: Arbitrary string (a key, or "<node>#<replica>")

    Returns:
        Integer in [0, 2**63)
    """
    digest = hashlib.blake2b(value.encode("utf-8"), digest_size=16).digest()
    return int.from_bytes(digest[:8], "big") & _SIGN_MASK


class _RingSnapshot(NamedTuple):
    """Immutable view of the ring: sorted positions and their owners."""

    hashes: Tuple[int, ...]
    owners: tuple
    node_count: int


_EMPTY = _RingSnapshot(hashes=(), owners=(), node_count=0)


class HashRing(Generic[NodeT]):
    """
    Consistent hash ring mapping keys to nodes.

    Each physical node owns ``virtual_nodes`` positions. Membership changes
    are serialized on a lock and published as a new immutable snapshot, so
    lookups never lock and never see a half-applied add or remove.
    """

    def __init__(self, virtual_nodes: int):
        """
        Args:
            virtual_nodes: Number of ring positions per physical node

        Raises:
            InvalidConfigurationError: If virtual_nodes is not positive
        """
        if isinstance(virtual_nodes, bool) or not isinstance(virtual_nodes, int) or virtual_nodes <= 0:
            raise InvalidConfigurationError(f"virtual_nodes must be a positive integer, got {virtual_nodes!r}")

        self._virtual_nodes = virtual_nodes
        self._positions: Dict[int, NodeT] = {}
        self._write_lock = threading.Lock()
        self._snapshot = _EMPTY

    @property
    def virtual_nodes(self) -> int:
        return self._virtual_nodes

    def _replica_hashes(self, node: NodeT) -> List[int]:
        return [hash_key(f"{node}#{i}") for i in range(self._virtual_nodes)]

    def add_node(self, node: NodeT) -> None:
        """
        Place all virtual positions of a node on the ring.

        A position that collides with an existing one is taken over by
        this node.

        Args:
            node: Node identifier; str(node) is the hash input
        """
        with self._write_lock:
            for position in self._replica_hashes(node):
                self._positions[position] = node
            self._publish()

        logger.info("Added node to hash ring", node=str(node), virtual_nodes=self._virtual_nodes)

    def remove_node(self, node: NodeT) -> None:
        """
        Remove every virtual position owned by a node.

        Args:
            node: Node identifier previously passed to add_node
        """
        removed = 0
        with self._write_lock:
            for position in self._replica_hashes(node):
                if self._positions.get(position) == node:
                    del self._positions[position]
                    removed += 1
            self._publish()

        logger.info("Removed node from hash ring", node=str(node), positions_removed=removed)

    def _publish(self) -> None:
        """Rebuild and swap in the lookup snapshot. Caller holds the write lock."""
        ordered = sorted(self._positions.items())
        self._snapshot = _RingSnapshot(
            hashes=tuple(position for position, _ in ordered),
            owners=tuple(owner for _, owner in ordered),
            node_count=len(set(self._positions.values())),
        )

    @staticmethod
    def _successor_index(snapshot: _RingSnapshot, key: str) -> int:
        index = bisect.bisect_left(snapshot.hashes, hash_key(key))
        # Past the largest position: wrap around to the first
        return 0 if index == len(snapshot.hashes) else index

    def get_node_for_key(self, key: str) -> Optional[NodeT]:
        """
        Find the node owning a key.

        Args:
            key: Key to route

        Returns:
            Owner of the first position clockwise from hash(key), or None
            if the ring is empty
        """
        snapshot = self._snapshot
        if not snapshot.hashes:
            return None
        return snapshot.owners[self._successor_index(snapshot, key)]

    def get_nodes_for_key(self, key: str, count: int) -> List[NodeT]:
        """
        Return up to ``count`` distinct nodes for a key, in clockwise order.

        The first element is always get_node_for_key(key). The ring is
        walked at most once, including the wraparound.

        Args:
            key: Key to route
            count: Maximum number of distinct nodes wanted

        Returns:
            Ordered, duplicate-free list of nodes (empty if the ring is
            empty or count <= 0)
        """
        snapshot = self._snapshot
        if not snapshot.hashes or count <= 0:
            return []

        wanted = min(count, snapshot.node_count)
        total = len(snapshot.hashes)
        start = self._successor_index(snapshot, key)

        result: List[NodeT] = []
        seen = set()
        for offset in range(total):
            owner = snapshot.owners[(start + offset) % total]
            if owner not in seen:
                seen.add(owner)
                result.append(owner)
                if len(result) >= wanted:
                    break
        return result

    @property
    def nodes(self) -> List[NodeT]:
        """Distinct physical nodes currently on the ring, in ring order."""
        return list(dict.fromkeys(self._snapshot.owners))

    def __contains__(self, node: object) -> bool:
        return node in self._snapshot.owners

    def __len__(self) -> int:
        """Number of occupied ring positions."""
        return len(self._snapshot.hashes)
