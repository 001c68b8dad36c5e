"""Identifier for a remote cache node."""

from dataclasses import dataclass

from kvcache.exceptions import InvalidConfigurationError


@dataclass(frozen=True)
class CacheNode:
    """
    A cache node addressed by its base URL.

    str(node) is the normalized URL without a trailing slash. It is the
    input to ring hashing, and equality follows it, so two nodes built from
    "http://h:1" and "http://h:1/" route identically.
    """

    base_url: str

    def __post_init__(self):
        if not self.base_url or not self.base_url.strip():
            raise InvalidConfigurationError("Cache node URL must not be empty")
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))

    def resolve(self, path: str) -> str:
        """Join a path onto the node's base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def __str__(self) -> str:
        return self.base_url
