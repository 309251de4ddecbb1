"""
services/subscription_service.py
--------------------------------
Business logic for tracked subscriptions.

Turns already-validated command input into repository calls and the
repository's results (or errors) into reply text. Not-found and
database failures are told apart so the user gets the right message.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from models.errors import StoreError, SubscriptionError, SubscriptionNotFoundError
from models.subscription import Subscription, SubscriptionPatch
from repositories.caching_repo import CachingSubscriptionRepository
from utils.dates import format_month
from utils.logger import get_logger

logger = get_logger(__name__)


def format_subscription(sub: Subscription) -> str:
    """Multi-line reply card for one subscription."""
    return (
        f"  🔖 #{sub.id}\n"
        f"  📌 Service: {sub.service_name}\n"
        f"  💶 Price: {sub.price}\n"
        f"  👤 User: {sub.user_id}\n"
        f"  📅 Start: {format_month(sub.start_date)}\n"
        f"  🏁 End: {format_month(sub.end_date) if sub.end_date else 'open-ended'}"
    )


class SubscriptionService:
    """
    Handles all business logic for subscriptions.

    Responsibilities:
        - Create, show, edit, delete and list subscriptions.
        - Merge partial edits into the stored subscription.
        - Compute price totals with optional filters.
    """

    def __init__(self, repo: CachingSubscriptionRepository):
        self.repo = repo

    def add_subscription(
        self,
        service_name: str,
        price: int,
        user_id: UUID,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> str:
        """Create a subscription and describe it as stored."""
        sub = Subscription(
            service_name=service_name,
            price=price,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
        )
        try:
            new_id = self.repo.create(sub)
        except StoreError as e:
            logger.error(f"Create failed: {e}")
            return "⚠️ Failed to create subscription. Try again later."

        try:
            created = self.repo.get_by_id(new_id)
        except SubscriptionError as e:
            # The insert succeeded; show what was written.
            logger.warning(f"Re-reading subscription #{new_id} after create failed: {e}")
            sub.id = new_id
            created = sub
        return f"✅ Subscription added:\n{format_subscription(created)}"

    def get_subscription(self, subscription_id: int) -> str:
        try:
            sub = self.repo.get_by_id(subscription_id)
        except SubscriptionNotFoundError:
            return f"⚠️ Subscription #{subscription_id} not found."
        except StoreError as e:
            logger.error(f"Get failed: {e}")
            return "⚠️ Failed to load subscription. Try again later."
        return f"📄 Subscription:\n{format_subscription(sub)}"

    def edit_subscription(self, subscription_id: int, patch: SubscriptionPatch) -> str:
        """
        Apply a partial edit. Fields missing from `patch` keep their
        stored value.
        """
        if patch.is_empty():
            return "⚠️ Nothing to change. Give at least one field."

        try:
            existing = self.repo.get_by_id(subscription_id)
            self.repo.update(patch.apply_to(existing))
        except SubscriptionNotFoundError:
            return f"⚠️ Subscription #{subscription_id} not found."
        except StoreError as e:
            logger.error(f"Update failed: {e}")
            return "⚠️ Failed to update subscription. Try again later."

        try:
            updated = self.repo.get_by_id(subscription_id)
        except SubscriptionError as e:
            logger.error(f"Re-reading subscription #{subscription_id} after update failed: {e}")
            return "⚠️ Subscription updated, but loading it back failed."
        logger.info(f"Subscription #{subscription_id} edited")
        return f"✏️ Subscription updated:\n{format_subscription(updated)}"

    def delete_subscription(self, subscription_id: int) -> str:
        try:
            self.repo.delete(subscription_id)
        except SubscriptionNotFoundError:
            return f"⚠️ Subscription #{subscription_id} not found."
        except StoreError as e:
            logger.error(f"Delete failed: {e}")
            return "⚠️ Failed to delete subscription. Try again later."
        return f"🗑️ Subscription #{subscription_id} deleted."

    def list_subscriptions(self) -> str:
        """One line per stored subscription, or a 'nothing yet' note."""
        try:
            subs = self.repo.list_all()
        except StoreError as e:
            logger.error(f"List failed: {e}")
            return "⚠️ Failed to list subscriptions. Try again later."
        if not subs:
            return "📭 No subscriptions recorded yet."
        lines = ["📋 Subscriptions:\n"]
        lines.extend(f"  {sub}" for sub in subs)
        return "\n".join(lines)

    def get_total(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[UUID] = None,
        service_name: Optional[str] = None,
    ) -> str:
        """Total price of the subscriptions matching every given filter."""
        try:
            total = self.repo.sum_total(
                start_date=start_date.isoformat() if start_date else None,
                end_date=end_date.isoformat() if end_date else None,
                user_id=str(user_id) if user_id else None,
                service_name=service_name,
            )
        except StoreError as e:
            logger.error(f"Total failed: {e}")
            return "⚠️ Failed to calculate total. Try again later."

        filters = []
        if start_date:
            filters.append(f"from {format_month(start_date)}")
        if end_date:
            filters.append(f"until {format_month(end_date)}")
        if user_id:
            filters.append(f"user {user_id}")
        if service_name:
            filters.append(f"service {service_name}")
        scope = f" ({', '.join(filters)})" if filters else ""
        return f"💶 Total{scope}: {total}"
