"""
models/subscription.py
----------------------
Domain model for tracked subscriptions and partial updates to them.
"""

import json
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional
from uuid import UUID


@dataclass
class Subscription:
    """
    Represents a single paid subscription.

    Attributes:
        service_name: Name of the subscribed service (e.g., 'Netflix').
        price: Price in minor currency units (e.g., 999 for 9.99).
        user_id: Opaque UUID of the owning user.
        start_date: First day of the starting month.
        end_date: First day of the last month, or None if open-ended.
            Callers must not set it before start_date.
        id: Database primary key (None for new records).
    """
    service_name: str
    price: int
    user_id: UUID
    start_date: date
    end_date: Optional[date] = None
    id: Optional[int] = None

    def to_json(self) -> str:
        """Serialize for the cache (ISO dates, UUID as string)."""
        return json.dumps({
            "id": self.id,
            "service_name": self.service_name,
            "price": self.price,
            "user_id": str(self.user_id),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
        })

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Subscription":
        """
        Rebuild a Subscription from its cached JSON form.

        Raises:
            ValueError: On malformed JSON or field values.
            KeyError: If a required field is missing.
        """
        data = json.loads(raw)
        end = data.get("end_date")
        return cls(
            id=data["id"],
            service_name=data["service_name"],
            price=int(data["price"]),
            user_id=UUID(data["user_id"]),
            start_date=date.fromisoformat(data["start_date"]),
            end_date=date.fromisoformat(end) if end else None,
        )

    def __str__(self) -> str:
        end = self.end_date.strftime("%m-%Y") if self.end_date else "open"
        return (
            f"#{self.id} {self.service_name}: {self.price} "
            f"({self.start_date.strftime('%m-%Y')} → {end}) user {self.user_id}"
        )


@dataclass
class SubscriptionPatch:
    """
    A merge-style partial update: fields left as None (or empty text)
    keep the stored value.
    """
    service_name: Optional[str] = None
    price: Optional[int] = None
    user_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def is_empty(self) -> bool:
        return not any((
            self.service_name,
            self.price is not None,
            self.user_id is not None,
            self.start_date is not None,
            self.end_date is not None,
        ))

    def apply_to(self, sub: Subscription) -> Subscription:
        """Return a copy of `sub` with every present field replaced."""
        changes = {}
        if self.service_name:
            changes["service_name"] = self.service_name
        if self.price is not None:
            changes["price"] = self.price
        if self.user_id is not None:
            changes["user_id"] = self.user_id
        if self.start_date is not None:
            changes["start_date"] = self.start_date
        if self.end_date is not None:
            changes["end_date"] = self.end_date
        return replace(sub, **changes)
