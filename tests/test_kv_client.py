"""Tests for the retrying key-value client."""

import pytest

from kvcache.config import settings
from kvcache.exceptions import (
    ExhaustedRetriesError,
    InvalidArgumentError,
    InvalidConfigurationError,
    NoNodesAvailableError,
    TransportError
)
from kvcache.services.kv_client import KeyValueClient, LookupStatus
from kvcache.services.routing import CacheNode
from kvcache.services.transport import NodeHealth, ReadResult, Transport

NODES = ["http://node-a:8081", "http://node-b:8082", "http://node-c:8083"]


class StubTransport(Transport):
    """In-memory transport with per-node failure injection."""

    def __init__(self, failing=()):
        self.failing = {str(node) for node in failing}
        self.stores = {}
        self.calls = []
        self.closed = False

    def _check(self, op, node):
        self.calls.append((op, str(node)))
        if str(node) in self.failing:
            raise TransportError(node, f"{op} refused")

    def write(self, node, key, value):
        self._check("write", node)
        self.stores.setdefault(str(node), {})[key] = value

    def read(self, node, key):
        self._check("read", node)
        store = self.stores.get(str(node), {})
        if key in store:
            return ReadResult.hit(store[key])
        return ReadResult.miss()

    def probe(self, node):
        return NodeHealth.DOWN if str(node) in self.failing else NodeHealth.UP

    def close(self):
        self.closed = True


def make_client(transport, max_retries=3, nodes=NODES):
    return KeyValueClient(nodes, max_retries=max_retries, virtual_nodes=64, transport=transport)


def test_empty_node_list_rejected():
    with pytest.raises(InvalidConfigurationError):
        KeyValueClient([], transport=StubTransport())


def test_max_retries_clamped_to_one():
    client = make_client(StubTransport(), max_retries=0)
    assert client.max_retries == 1
    assert len(client.nodes_for_key("k")) == 1


def test_put_then_get_round_trip_on_primary():
    transport = StubTransport()
    client = make_client(transport)
    primary = client.nodes_for_key("alpha")[0]

    assert client.put("alpha", "1") == primary
    assert client.get("alpha") == "1"
    assert transport.calls == [("write", str(primary)), ("read", str(primary))]


def test_put_falls_back_to_second_candidate():
    key = "user:17"
    routing_client = make_client(StubTransport())
    first, second, third = routing_client.nodes_for_key(key)

    transport = StubTransport(failing=[first])
    client = make_client(transport)

    assert client.put(key, "v") == second
    assert transport.calls == [("write", str(first)), ("write", str(second))]
    assert str(third) not in {node for _, node in transport.calls}


def test_put_exhaustion_raises_last_error():
    key = "user:99"
    candidates = make_client(StubTransport()).nodes_for_key(key)
    transport = StubTransport(failing=NODES)
    client = make_client(transport)

    with pytest.raises(ExhaustedRetriesError) as excinfo:
        client.put(key, "v")

    error = excinfo.value
    assert isinstance(error, TransportError)
    assert error.node == candidates[-1]
    assert error.last_error.node == candidates[-1]
    assert error.__cause__ is error.last_error
    assert [node for _, node in transport.calls] == [str(n) for n in candidates]


def test_get_exhaustion_returns_none():
    transport = StubTransport(failing=NODES)
    client = make_client(transport)

    assert client.get("user:99") is None
    result = client.lookup("user:99")
    assert result.status == LookupStatus.UNREACHABLE
    assert result.attempts == 3


def test_get_not_found_is_authoritative():
    key = "orders:1"
    transport = StubTransport()
    client = make_client(transport)
    first, second, _ = client.nodes_for_key(key)
    transport.stores[str(second)] = {key: "stale"}

    result = client.lookup(key)
    assert result.status == LookupStatus.NOT_FOUND
    assert result.node == first
    assert client.get(key) is None
    assert ("read", str(second)) not in transport.calls


def test_get_skips_unreachable_primary():
    key = "orders:2"
    candidates = make_client(StubTransport()).nodes_for_key(key)
    transport = StubTransport(failing=[candidates[0]])
    transport.stores[str(candidates[1])] = {key: "fallback"}
    client = make_client(transport)

    result = client.lookup(key)
    assert result.found
    assert result.value == "fallback"
    assert result.node == candidates[1]
    assert result.attempts == 2


def test_fallback_write_is_unreadable_once_primary_recovers():
    key = "cart:5"
    candidates = make_client(StubTransport()).nodes_for_key(key)
    transport = StubTransport(failing=[candidates[0]])
    client = make_client(transport)

    assert client.put(key, "v") == candidates[1]
    transport.failing.clear()
    assert client.get(key) is None


def test_none_arguments_rejected():
    client = make_client(StubTransport())
    with pytest.raises(InvalidArgumentError):
        client.put(None, "v")
    with pytest.raises(InvalidArgumentError):
        client.put("k", None)
    with pytest.raises(InvalidArgumentError):
        client.get(None)


def test_emptied_ring_raises_no_nodes_available():
    client = make_client(StubTransport(), nodes=NODES[:1])
    client.remove_node(NODES[0])

    with pytest.raises(NoNodesAvailableError):
        client.put("k", "v")
    with pytest.raises(NoNodesAvailableError):
        client.get("k")


def test_membership_changes_reach_routing():
    client = make_client(StubTransport(), nodes=NODES[:1])
    client.add_node(NODES[1])
    assert sorted(str(n) for n in client.nodes) == sorted(NODES[:2])
    client.remove_node(CacheNode(NODES[0]))
    assert client.nodes == [CacheNode(NODES[1])]


def test_health_reports_each_node():
    transport = StubTransport(failing=[NODES[2]])
    client = make_client(transport)

    assert client.health() == {
        NODES[0]: NodeHealth.UP,
        NODES[1]: NodeHealth.UP,
        NODES[2]: NodeHealth.DOWN,
    }


def test_context_manager_closes_transport():
    transport = StubTransport()
    with make_client(transport) as client:
        client.put("k", "v")
    assert transport.closed


def test_node_list_defaults_to_configured_urls(monkeypatch):
    monkeypatch.setattr(settings, "node_urls", " http://node-x:9001, http://node-y:9002/ ,")

    client = KeyValueClient(virtual_nodes=32, transport=StubTransport())
    assert sorted(str(node) for node in client.nodes) == ["http://node-x:9001", "http://node-y:9002"]


def test_empty_configured_node_list_rejected(monkeypatch):
    monkeypatch.setattr(settings, "node_urls", "")

    with pytest.raises(InvalidConfigurationError):
        KeyValueClient(transport=StubTransport())
