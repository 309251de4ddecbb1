"""
models/errors.py
----------------
Exceptions raised by the data access layer.
"""

from typing import Optional


class SubscriptionError(Exception):
    """Base class for subscription persistence errors."""


class SubscriptionNotFoundError(SubscriptionError):
    """No live subscription exists for the requested id."""

    def __init__(self, subscription_id: int):
        super().__init__(f"subscription #{subscription_id} not found")
        self.subscription_id = subscription_id


class StoreError(SubscriptionError):
    """The database failed (connectivity, constraint, or row decoding)."""

    def __init__(self, operation: str, subscription_id: Optional[int] = None):
        target = f" #{subscription_id}" if subscription_id is not None else ""
        super().__init__(f"failed to {operation} subscription{target}")
        self.operation = operation
        self.subscription_id = subscription_id
