"""FastAPI application for a single cache node."""

import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from kvcache.config import settings
from kvcache.exceptions import (
    KVCacheException,
    kvcache_exception_handler,
    general_exception_handler
)
from kvcache.routes import cache_api
from kvcache.utils.log_config import configure_logging

configure_logging(settings.log_level)

logger = structlog.get_logger()

# Prometheus metrics
REQUEST_COUNT = Counter('kvcache_http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('kvcache_http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    cache = cache_api.get_cache()
    logger.info("Starting cache node", port=settings.port, capacity=cache.capacity)
    yield
    logger.info("Shutting down cache node", size=cache.size())


app = FastAPI(
    title="kvcache node",
    description="Bounded LRU cache node addressed by consistent-hashing clients",
    version="1.0.0",
    lifespan=lifespan
)


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Logging and metrics middleware."""
    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time

    if settings.enable_metrics:
        # Label by route template so per-key paths do not explode cardinality
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code
        ).inc()
        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(duration)

    logger.debug(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration=f"{duration:.3f}s"
    )

    return response


app.add_exception_handler(KVCacheException, kvcache_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(cache_api.router)


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    if not settings.enable_metrics:
        return Response("Metrics disabled", status_code=404)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "kvcache.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
