"""Fixed-window rate limiting backed by Redis.

Counters live in Redis with an explicit expiry, never in process memory, so
every worker shares the same window. Each hit does ``INCR`` on
``ratelimit:<scope>:<client>`` and arms the window expiry if the key has none
(Redis 7+ for ``EXPIRE NX``).
"""

import logging

import redis

from usergate.config import get_settings
from usergate.errors import TooManyRequests

logger = logging.getLogger(__name__)
settings = get_settings()

# Synchronous Redis client shared by API endpoints
_redis: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Get the Redis client used for rate-limit counters."""
    global _redis
    if _redis is None:
        _redis = redis.from_url(settings.redis_url)
    return _redis


def rate_limit_key(scope: str, client_id: str) -> str:
    return f"ratelimit:{scope}:{client_id}"


def hit(scope: str, client_id: str, limit: int, window_seconds: int) -> bool:
    """Count one request and report whether it is within the limit.

    ``INCR`` and ``EXPIRE NX`` run in one MULTI/EXEC transaction, so a counter
    never exists without an expiry. Fails open: if Redis is unreachable the
    request is allowed and the error is logged.
    """
    key = rate_limit_key(scope, client_id)
    try:
        pipe = get_redis().pipeline(transaction=True)
        pipe.incr(key)
        pipe.expire(key, window_seconds, nx=True)
        count, _ = pipe.execute()
    except redis.RedisError as e:
        logger.error(f"Rate limit check failed for {key}: {e}")
        return True
    return count <= limit


def enforce(scope: str, client_id: str) -> None:
    """Raise ``TooManyRequests`` when the client is over its limit for ``scope``."""
    if not settings.rate_limit_enabled:
        return
    if not hit(scope, client_id, settings.rate_limit_requests, settings.rate_limit_window_seconds):
        logger.warning(f"Rate limit exceeded for {scope} by {client_id}")
        raise TooManyRequests()
