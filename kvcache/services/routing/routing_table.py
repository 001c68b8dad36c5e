"""Routing table: ordered candidate nodes per key."""

from typing import Generic, Iterable, List

from kvcache.exceptions import InvalidArgumentError
from kvcache.services.routing.hash_ring import HashRing, NodeT


class RoutingTable(Generic[NodeT]):
    """Delegates node membership and candidate lookup to a HashRing."""

    def __init__(self, virtual_nodes: int):
        self._ring: HashRing[NodeT] = HashRing(virtual_nodes)

    def add_node(self, node: NodeT) -> None:
        if node is None:
            raise InvalidArgumentError("node")
        self._ring.add_node(node)

    def add_nodes(self, nodes: Iterable[NodeT]) -> None:
        for node in nodes:
            self.add_node(node)

    def remove_node(self, node: NodeT) -> None:
        if node is None:
            raise InvalidArgumentError("node")
        self._ring.remove_node(node)

    def nodes_for_key(self, key: str, max_count: int) -> List[NodeT]:
        """Candidate nodes for a key, primary first. The list is the caller's to mutate."""
        return list(self._ring.get_nodes_for_key(key, max_count))

    @property
    def nodes(self) -> List[NodeT]:
        return self._ring.nodes
