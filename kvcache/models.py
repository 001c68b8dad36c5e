"""Pydantic models for request/response validation."""

from typing import Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error_code: str = Field(..., description="Error code identifier")
    error_message: str = Field(..., description="Human-readable error message")


class PutRequest(BaseModel):
    """Request model for storing a key on a cache node."""

    # Optional so a missing field is answered with 400 rather than 422
    key: Optional[str] = Field(default=None, description="Key to store")
    value: Optional[str] = Field(default=None, description="Value to store")


class CacheStatsResponse(BaseModel):
    """Response model for cache node statistics."""

    size: int = Field(..., ge=0, description="Number of keys held")
    capacity: int = Field(..., gt=0, description="Maximum number of keys")
    hits: int = Field(..., ge=0, description="Successful lookups")
    misses: int = Field(..., ge=0, description="Lookups for absent keys")
    evictions: int = Field(..., ge=0, description="Entries evicted to make room")
