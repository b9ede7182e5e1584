"""
Redis-based rate limiting middleware

Implements sliding window rate limiting using Redis sorted sets, keyed by
client IP. The default budget is 100 API requests per 15 minutes.

The limiter fails open: when Redis is unreachable the request is allowed and
the error is logged.
"""

import logging
from datetime import datetime

from flask import jsonify, request
from redis import Redis
from redis.exceptions import RedisError

from config import load_app_config

logger = logging.getLogger(__name__)

_redis_client = None


def get_redis_client() -> Redis:
    """Get the shared Redis client, created on first use from REDIS_URL."""
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(
            load_app_config().redis_url, decode_responses=False
        )
    return _redis_client


def set_redis_client(client):
    """Replace the shared Redis client (None resets to lazy creation)."""
    global _redis_client
    _redis_client = client


def client_identifier() -> str:
    """Client IP for the current request.

    Forwarding headers are never read here; behind a proxy, TRUSTED_PROXIES
    makes ProxyFix rewrite remote_addr from X-Forwarded-For.
    """
    return request.remote_addr or "unknown"


def rate_limit_api(
    identifier: str, max_requests: int = 100, window_seconds: int = 900
) -> bool:
    """Redis sliding window rate limiter for API requests.

    Algorithm:
    1. Remove requests older than window (ZREMRANGEBYSCORE)
    2. Count remaining requests (ZCARD)
    3. Add current request (ZADD)
    4. Set expiry on key (EXPIRE)

    Args:
        identifier: Client IP address
        max_requests: Maximum requests allowed in window (default 100)
        window_seconds: Time window in seconds (default 900)

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    key = f"api_requests:{identifier}"
    now = datetime.now().timestamp()
    window_start = now - window_seconds

    try:
        pipe = get_redis_client().pipeline()
        pipe.zremrangebyscore(key, 0, window_start)
        pipe.zcard(key)
        pipe.zadd(key, {now: now})
        pipe.expire(key, window_seconds)

        results = pipe.execute()
        # results[1] is the count BEFORE adding current request
        request_count = results[1]

        return request_count < max_requests

    except RedisError as e:
        logger.warning(f"[Rate Limiter] Redis error: {e}")
        return True  # Fail open


def check_redis_connection() -> bool:
    """Test Redis connectivity."""
    try:
        return bool(get_redis_client().ping())
    except RedisError:
        return False


def init_app(app, config=None):
    """Register the API rate limiter with a Flask app.

    Args:
        app: Flask application instance
        config: AppConfig (defaults to load_app_config())
    """
    config = config or load_app_config()
    if not config.rate_limit_enabled:
        logger.info("API rate limiting disabled")
        return

    @app.before_request
    def enforce_rate_limit():
        """Reject API requests over the per-IP budget with 429."""
        if not request.path.startswith("/api/"):
            return None

        allowed = rate_limit_api(
            client_identifier(),
            max_requests=config.rate_limit_max_requests,
            window_seconds=config.rate_limit_window_seconds,
        )
        if allowed:
            return None

        return (
            jsonify(
                {"error": "Too many requests from this IP, please try again later."}
            ),
            429,
        )
