"""
cache/subscription_cache.py
---------------------------
Key-value cache for single subscriptions, keyed by ``str(id)``.

Two implementations share one interface:
    - RedisSubscriptionCache stores JSON with a TTL in Redis.
    - NullSubscriptionCache stores nothing and always misses.

Implementations raise on failure; deciding that a cache failure is
harmless is the caller's job.
"""

from abc import ABC, abstractmethod
from typing import Optional

import redis

from models.subscription import Subscription

DEFAULT_TTL_SECONDS = 3600


class SubscriptionCache(ABC):
    """Abstract cache of Subscription objects."""

    @abstractmethod
    def get(self, subscription_id: int) -> Optional[Subscription]:
        """
        Look up a subscription.

        Returns:
            The cached Subscription, or None on a miss.
        """

    @abstractmethod
    def set(self, sub: Subscription) -> None:
        """Store `sub` under its id, replacing any previous entry."""

    @abstractmethod
    def delete(self, subscription_id: int) -> None:
        """Remove the entry for `subscription_id` if present."""

    def close(self) -> None:
        """Release any connection held by the cache."""


class RedisSubscriptionCache(SubscriptionCache):
    """
    Redis-backed cache.

    Entries expire after `ttl_seconds`; expiry is left to Redis itself.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(subscription_id: int) -> str:
        return str(subscription_id)

    def get(self, subscription_id: int) -> Optional[Subscription]:
        raw = self.client.get(self._key(subscription_id))
        if raw is None:
            return None
        return Subscription.from_json(raw)

    def set(self, sub: Subscription) -> None:
        self.client.set(self._key(sub.id), sub.to_json(), ex=self.ttl_seconds)

    def delete(self, subscription_id: int) -> None:
        self.client.delete(self._key(subscription_id))

    def close(self) -> None:
        self.client.close()


class NullSubscriptionCache(SubscriptionCache):
    """Cache used when Redis is disabled or unreachable: always a miss."""

    def get(self, subscription_id: int) -> Optional[Subscription]:
        return None

    def set(self, sub: Subscription) -> None:
        pass

    def delete(self, subscription_id: int) -> None:
        pass
