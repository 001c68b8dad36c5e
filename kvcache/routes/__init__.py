"""API routers for the cache node."""
