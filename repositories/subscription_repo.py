"""
repositories/subscription_repo.py
---------------------------------
Data access layer for subscriptions.
All SQL queries related to the `subscriptions` table live here.

Driver errors are rolled back, logged and re-raised as StoreError with
the operation name and id attached. "No such row" is not an error at
this level: reads return None and writes report it in their result.
"""

from typing import Optional

import psycopg2

from db.connection import ConnectionPool
from models.errors import StoreError
from models.subscription import Subscription
from models.total_query import TotalQuery
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, service_name, price, user_id, start_date, end_date"

# Raised by the driver, or while turning a row into a Subscription.
_STORE_ERRORS = (psycopg2.Error, TypeError, ValueError)


class SubscriptionRepository:
    """Repository for CRUD and aggregate queries on the subscriptions table."""

    def __init__(self, db: ConnectionPool):
        self.db = db

    # ── CREATE ────────────────────────────────────────────

    def add(self, sub: Subscription) -> Subscription:
        """
        Insert a new subscription.

        Args:
            sub: The Subscription to persist (its `id` is ignored).

        Returns:
            The same Subscription with its `id` populated.

        Raises:
            StoreError: If the insert fails.
        """
        sql = """
            INSERT INTO subscriptions (service_name, price, user_id, start_date, end_date)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id;
        """
        with self.db.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, (
                        sub.service_name, sub.price, sub.user_id,
                        sub.start_date, sub.end_date,
                    ))
                    sub.id = cur.fetchone()[0]
                conn.commit()
            except _STORE_ERRORS as e:
                conn.rollback()
                logger.error(f"Failed to create subscription: {e}")
                raise StoreError("create") from e
        logger.info(f"Subscription #{sub.id} created ({sub.service_name})")
        return sub

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, subscription_id: int) -> Optional[Subscription]:
        """
        Fetch a single subscription by ID.

        Returns:
            A Subscription or None if not found.
        """
        sql = f"SELECT {_COLUMNS} FROM subscriptions WHERE id = %s;"
        with self.db.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, (subscription_id,))
                    row = cur.fetchone()
                    return self._row_to_subscription(row) if row else None
            except _STORE_ERRORS as e:
                conn.rollback()
                logger.error(f"Failed to get subscription #{subscription_id}: {e}")
                raise StoreError("get", subscription_id) from e

    def get_all(self) -> list[Subscription]:
        """Fetch every subscription ordered by id."""
        sql = f"SELECT {_COLUMNS} FROM subscriptions ORDER BY id;"
        with self.db.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql)
                    return [self._row_to_subscription(r) for r in cur.fetchall()]
            except _STORE_ERRORS as e:
                conn.rollback()
                logger.error(f"Failed to list subscriptions: {e}")
                raise StoreError("list") from e

    def sum_total(self, query: TotalQuery) -> int:
        """
        Execute a TotalQuery and return the summed price.

        A NULL aggregate (no matching rows) is returned as 0.
        """
        sql, _ = query.build()
        with self.db.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, query.params)
                    row = cur.fetchone()
            except _STORE_ERRORS as e:
                conn.rollback()
                logger.error(f"Failed to sum subscriptions: {e}")
                raise StoreError("sum") from e
        if row is None or row[0] is None:
            return 0
        return int(row[0])

    # ── UPDATE ────────────────────────────────────────────

    def update(self, sub: Subscription) -> Optional[Subscription]:
        """
        Overwrite every mutable column of an existing subscription.

        Args:
            sub: Subscription with updated fields (must have id set).

        Returns:
            The row as stored after the update, or None if no row has that id.
        """
        sql = f"""
            UPDATE subscriptions
            SET service_name = %s, price = %s, user_id = %s, start_date = %s, end_date = %s
            WHERE id = %s
            RETURNING {_COLUMNS};
        """
        with self.db.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, (
                        sub.service_name, sub.price, sub.user_id,
                        sub.start_date, sub.end_date, sub.id,
                    ))
                    row = cur.fetchone()
                    updated = self._row_to_subscription(row) if row else None
                conn.commit()
            except _STORE_ERRORS as e:
                conn.rollback()
                logger.error(f"Failed to update subscription #{sub.id}: {e}")
                raise StoreError("update", sub.id) from e
        if updated:
            logger.info(f"Subscription #{sub.id} updated")
        return updated

    # ── DELETE ────────────────────────────────────────────

    def delete(self, subscription_id: int) -> bool:
        """
        Delete a subscription by ID.

        Returns:
            True if a row was deleted, False otherwise.
        """
        sql = "DELETE FROM subscriptions WHERE id = %s;"
        with self.db.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, (subscription_id,))
                    deleted = cur.rowcount > 0
                conn.commit()
            except _STORE_ERRORS as e:
                conn.rollback()
                logger.error(f"Failed to delete subscription #{subscription_id}: {e}")
                raise StoreError("delete", subscription_id) from e
        if deleted:
            logger.info(f"Subscription #{subscription_id} deleted")
        return deleted

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_subscription(row: tuple) -> Subscription:
        """Convert a database row tuple to a Subscription domain object."""
        return Subscription(
            id=row[0],
            service_name=row[1],
            price=int(row[2]),
            user_id=row[3],
            start_date=row[4],
            end_date=row[5],
        )
