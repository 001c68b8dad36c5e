"""Custom exceptions and FastAPI exception handlers for kvcache."""

from typing import Any, Optional

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from kvcache.models import ErrorResponse

logger = structlog.get_logger()


class KVCacheException(Exception):
    """Base exception for all kvcache errors."""

    status_code = 500

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(message)


class InvalidConfigurationError(KVCacheException, ValueError):
    """Raised when a cache, ring or client is constructed with unusable settings."""

    def __init__(self, message: str):
        super().__init__("INVALID_CONFIGURATION", message)


class InvalidArgumentError(KVCacheException, ValueError):
    """Raised when a None key or value is passed to a cache operation."""

    status_code = 400

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__("INVALID_ARGUMENT", f"{argument} must not be None")


class NoNodesAvailableError(KVCacheException):
    """Raised when the routing table yields no candidate nodes for a key."""

    status_code = 503

    def __init__(self, key: str):
        self.key = key
        super().__init__("NO_NODES_AVAILABLE", f"No cache nodes available for key: {key}")


class TransportError(KVCacheException):
    """Raised by a transport when a single attempt against a node fails."""

    status_code = 502

    def __init__(self, node: Any, message: str, error_code: str = "TRANSPORT_ERROR"):
        self.node = node
        super().__init__(error_code, f"{node}: {message}" if node is not None else message)


class ExhaustedRetriesError(TransportError):
    """
    Raised when a write failed on every candidate node.

    ``node`` and ``last_error`` identify the last attempted candidate and
    the TransportError it produced.
    """

    def __init__(self, key: str, last_error: Optional[TransportError] = None):
        self.key = key
        self.last_error = last_error
        if last_error is not None:
            message = f"write for key {key!r} failed on all nodes, last error: {last_error.message}"
        else:
            message = "write failed on all nodes"
        super().__init__(None, message, error_code="EXHAUSTED_RETRIES")
        self.node = last_error.node if last_error is not None else None


async def kvcache_exception_handler(request: Request, exc: KVCacheException) -> JSONResponse:
    """Render a KVCacheException as a standard error response."""
    logger.warning(
        "Request failed",
        path=request.url.path,
        error_code=exc.error_code,
        error_message=exc.message
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error_code=exc.error_code, error_message=exc.message).model_dump()
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error_code="INTERNAL_ERROR",
            error_message="An unexpected error occurred"
        ).model_dump()
    )
