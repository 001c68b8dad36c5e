"""Transport used by the client to talk to remote cache nodes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import quote

import httpx
import structlog

from kvcache.exceptions import TransportError
from kvcache.services.routing.cache_node import CacheNode

logger = structlog.get_logger()


class NodeHealth(str, Enum):
    """Result of a health probe."""

    UP = "UP"
    DOWN = "DOWN"


@dataclass(frozen=True)
class ReadResult:
    """Authoritative answer from a node: the value, or a confirmed miss."""

    found: bool
    value: Optional[str] = None

    @classmethod
    def hit(cls, value: str) -> "ReadResult":
        return cls(found=True, value=value)

    @classmethod
    def miss(cls) -> "ReadResult":
        return cls(found=False)


class Transport(ABC):
    """
    Per-node read/write/probe operations.

    write() and read() raise TransportError for anything that is not an
    answer from the node (connection failure, timeout, unexpected status).
    """

    @abstractmethod
    def write(self, node: CacheNode, key: str, value: str) -> None:
        """Store a key on a node; returns only on success."""
        pass

    @abstractmethod
    def read(self, node: CacheNode, key: str) -> ReadResult:
        """Fetch a key from a node."""
        pass

    @abstractmethod
    def probe(self, node: CacheNode) -> NodeHealth:
        """Check whether a node is reachable and healthy."""
        pass

    def close(self) -> None:
        """Release any connections held by the transport."""
        pass


class HttpTransport(Transport):
    """HTTP transport against the cache node API (/put, /get/{key}, /health)."""

    def __init__(self, timeout_seconds: float = 2.0, client: Optional[httpx.Client] = None):
        """
        Args:
            timeout_seconds: Connect and operation timeout for every attempt
            client: Optional preconfigured httpx client (owned by the caller)
        """
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout_seconds))

    def write(self, node: CacheNode, key: str, value: str) -> None:
        url = node.resolve("/put")
        try:
            response = self._client.post(url, json={"key": key, "value": value})
        except httpx.HTTPError as e:
            raise TransportError(node, f"PUT request failed: {e!r}") from e

        if not response.is_success:
            raise TransportError(node, f"PUT returned status {response.status_code}")

    def read(self, node: CacheNode, key: str) -> ReadResult:
        url = node.resolve(f"/get/{quote(key, safe='')}")
        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            raise TransportError(node, f"GET request failed: {e!r}") from e

        if response.status_code == 200:
            return ReadResult.hit(response.text)
        if response.status_code == 404:
            return ReadResult.miss()
        raise TransportError(node, f"GET returned status {response.status_code}")

    def probe(self, node: CacheNode) -> NodeHealth:
        try:
            response = self._client.get(node.resolve("/health"))
        except httpx.HTTPError as e:
            logger.warning("Health probe failed", node=str(node), error=repr(e))
            return NodeHealth.DOWN
        return NodeHealth.UP if response.status_code == 200 else NodeHealth.DOWN

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
