"""
repositories/caching_repo.py
----------------------------
Read-through / write-through cache in front of SubscriptionRepository.

Every subscription read or write goes through this class. The database
is the source of truth; the cache only saves round trips:

    - create:     insert, then cache the new row.
    - get_by_id:  cache first; on a miss read the database and cache it.
    - update:     drop the cache entry, update the database, then cache
                  the stored row. If the update fails the entry stays
                  dropped and the next read refills it.
    - delete:     delete from the database; drop the cache entry only if
                  a row was actually deleted.
    - list_all / sum_total: database only.

Cache calls never fail an operation. Their errors are logged as
warnings and the operation continues as if the cache had missed.
"""

from typing import Optional

from cache.subscription_cache import SubscriptionCache
from models.errors import SubscriptionNotFoundError
from models.subscription import Subscription
from models.total_query import TotalQuery
from repositories.subscription_repo import SubscriptionRepository
from utils.logger import get_logger

logger = get_logger(__name__)


class CachingSubscriptionRepository:
    """Single access point for subscription persistence."""

    def __init__(self, store: SubscriptionRepository, cache: SubscriptionCache):
        self.store = store
        self.cache = cache

    # ── CREATE ────────────────────────────────────────────

    def create(self, sub: Subscription) -> int:
        """
        Persist a new subscription.

        Returns:
            The id assigned by the database.

        Raises:
            StoreError: If the insert fails.
        """
        created = self.store.add(sub)
        self._cache_set(created)
        return created.id

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, subscription_id: int) -> Subscription:
        """
        Fetch one subscription, preferring the cache.

        Raises:
            SubscriptionNotFoundError: If no row has that id.
            StoreError: If the database read fails.
        """
        cached = self._cache_get(subscription_id)
        if cached is not None:
            logger.debug(f"Subscription #{subscription_id} loaded from cache")
            return cached

        sub = self.store.get_by_id(subscription_id)
        if sub is None:
            raise SubscriptionNotFoundError(subscription_id)
        self._cache_set(sub)
        logger.debug(f"Subscription #{subscription_id} loaded from database")
        return sub

    def list_all(self) -> list[Subscription]:
        """Fetch every subscription straight from the database."""
        return self.store.get_all()

    def sum_total(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        user_id: Optional[str] = None,
        service_name: Optional[str] = None,
    ) -> int:
        """
        Sum the price of every subscription matching the given filters.
        Empty or missing filters are ignored; no match gives 0.
        """
        query = TotalQuery.for_filters(start_date, end_date, user_id, service_name)
        return self.store.sum_total(query)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, sub: Subscription) -> Subscription:
        """
        Overwrite a stored subscription with `sub`.

        Returns:
            The subscription as stored after the update.

        Raises:
            SubscriptionNotFoundError: If no row has `sub.id`.
            StoreError: If the database update fails.
        """
        # Must happen before the write so no reader sees the old cached row.
        self._cache_delete(sub.id)

        updated = self.store.update(sub)
        if updated is None:
            raise SubscriptionNotFoundError(sub.id)
        self._cache_set(updated)
        return updated

    # ── DELETE ────────────────────────────────────────────

    def delete(self, subscription_id: int) -> None:
        """
        Delete a subscription.

        Raises:
            SubscriptionNotFoundError: If no row was deleted.
            StoreError: If the database delete fails.
        """
        if not self.store.delete(subscription_id):
            raise SubscriptionNotFoundError(subscription_id)
        self._cache_delete(subscription_id)

    # ── CACHE HELPERS (best effort) ───────────────────────

    def _cache_get(self, subscription_id: int) -> Optional[Subscription]:
        try:
            return self.cache.get(subscription_id)
        except Exception as e:
            logger.warning(f"Cache lookup for #{subscription_id} failed; falling back to DB: {e}")
            return None

    def _cache_set(self, sub: Subscription) -> None:
        try:
            self.cache.set(sub)
        except Exception as e:
            logger.warning(f"Failed to cache subscription #{sub.id}: {e}")

    def _cache_delete(self, subscription_id: int) -> None:
        try:
            self.cache.delete(subscription_id)
        except Exception as e:
            logger.warning(f"Failed to evict subscription #{subscription_id} from cache: {e}")
