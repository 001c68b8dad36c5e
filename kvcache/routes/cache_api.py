"""API routes exposing a node's in-memory cache."""

from typing import Any

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import Counter
import structlog

from kvcache.config import settings
from kvcache.exceptions import InvalidArgumentError
from kvcache.models import CacheStatsResponse, PutRequest
from kvcache.services.in_memory_cache import BaseCache, get_in_memory_cache

logger = structlog.get_logger()

router = APIRouter(tags=["Cache"])

EVICTION_COUNT = Counter('kvcache_evictions_total', 'Entries evicted from the node cache')


def record_eviction(key: Any, value: Any) -> None:
    """Eviction listener for the node cache. Runs under the cache lock."""
    EVICTION_COUNT.inc()
    logger.debug("Evicted key", key=key)


def get_cache() -> BaseCache:
    """Dependency returning this node's cache, built on first use with the eviction listener."""
    return get_in_memory_cache(settings.cache_capacity, record_eviction)


@router.post(
    "/put",
    status_code=201,
    summary="Store a key",
    description="Store a key/value pair on this node, evicting the least recently used key when full."
)
async def put_endpoint(body: PutRequest, cache: BaseCache = Depends(get_cache)) -> Response:
    """Store a key/value pair."""
    if body.key is None:
        raise InvalidArgumentError("key")
    if body.value is None:
        raise InvalidArgumentError("value")

    cache.put(body.key, body.value)
    logger.debug("Stored key", key=body.key, size=cache.size())
    return Response(status_code=201)


@router.get(
    "/get/{key:path}",
    response_class=PlainTextResponse,
    summary="Fetch a key",
    description="Return the value stored for a key as plain text, or 404 if this node does not hold it."
)
async def get_endpoint(key: str, cache: BaseCache = Depends(get_cache)) -> PlainTextResponse:
    """Fetch a value."""
    value = cache.get(key)
    if value is None:
        return PlainTextResponse("", status_code=404)
    return PlainTextResponse(value)


@router.get("/health", response_class=PlainTextResponse, summary="Health check")
async def health_endpoint() -> PlainTextResponse:
    """Liveness probe used by clients."""
    return PlainTextResponse("OK")


@router.get("/stats", response_model=CacheStatsResponse, summary="Cache statistics")
async def stats_endpoint(cache: BaseCache = Depends(get_cache)) -> CacheStatsResponse:
    """Return size, capacity and hit/miss/eviction counters."""
    stats = cache.stats()
    return CacheStatsResponse(
        size=stats.size,
        capacity=stats.capacity,
        hits=stats.hits,
        misses=stats.misses,
        evictions=stats.evictions
    )
