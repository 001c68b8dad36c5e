"""Shared fixtures for kvcache tests."""

import pytest

from kvcache.services.in_memory_cache import reset_in_memory_cache


@pytest.fixture(autouse=True)
def fresh_node_cache():
    """Give every test its own node-level cache singleton."""
    reset_in_memory_cache()
    yield
    reset_in_memory_cache()
