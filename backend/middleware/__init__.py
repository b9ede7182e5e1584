"""Middleware package for security and request processing."""

from middleware.rate_limiter import check_redis_connection, rate_limit_api

__all__ = [
    "rate_limit_api",
    "check_redis_connection",
]
