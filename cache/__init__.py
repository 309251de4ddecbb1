"""
cache/ - Cache Layer
====================
Optional Redis cache in front of the subscriptions table.
`connect_cache()` picks the implementation once at start-up.
"""

import redis

from cache.subscription_cache import (
    DEFAULT_TTL_SECONDS,
    NullSubscriptionCache,
    RedisSubscriptionCache,
    SubscriptionCache,
)
from utils.logger import get_logger

logger = get_logger(__name__)

__all__ = [
    "NullSubscriptionCache",
    "RedisSubscriptionCache",
    "SubscriptionCache",
    "connect_cache",
]


def connect_cache(
    enabled: bool = True,
    host: str = "localhost",
    port: int = 6379,
    db: int = 0,
    password: str | None = None,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
) -> SubscriptionCache:
    """
    Connect to Redis and return a cache for subscriptions.

    Falls back to NullSubscriptionCache when caching is disabled or the
    server does not answer a PING, so the bot keeps working without it.
    """
    if not enabled:
        logger.info("Redis cache disabled; continuing without cache.")
        return NullSubscriptionCache()

    client = redis.Redis(
        host=host,
        port=port,
        db=db,
        password=password or None,
        decode_responses=True,
    )
    try:
        client.ping()
    except redis.RedisError as e:
        logger.warning(f"Redis not available ({e}); continuing without cache.")
        client.close()
        return NullSubscriptionCache()

    logger.info(f"Connected to Redis at {host}:{port}/{db} (ttl={ttl_seconds}s).")
    return RedisSubscriptionCache(client, ttl_seconds)
