import sys
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock
from uuid import UUID

import pytest
import redis

# Ensure project root on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from cache.subscription_cache import SubscriptionCache  # noqa: E402
from models.errors import StoreError  # noqa: E402
from models.subscription import Subscription  # noqa: E402
from repositories.caching_repo import CachingSubscriptionRepository  # noqa: E402

USER_A = UUID("60601fee-2bf1-4721-ae6f-7636e79a0cba")
USER_B = UUID("1f0e9f55-8c43-4c3e-9a56-6b3b0f4f8a11")

_DATE_COLUMNS = {"start_date", "end_date"}


class InMemoryStore:
    """Stands in for SubscriptionRepository; `events` records call order."""

    def __init__(self, events: list):
        self.events = events
        self.rows: dict[int, Subscription] = {}
        self.next_id = 1
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _call(self, name: str, subscription_id=None):
        self.calls.append(name)
        self.events.append(("store", name))
        if name in self.fail_on:
            raise StoreError(name, subscription_id)

    def add(self, sub):
        self._call("add")
        sub.id = self.next_id
        self.next_id += 1
        self.rows[sub.id] = replace(sub)
        return sub

    def get_by_id(self, subscription_id):
        self._call("get_by_id", subscription_id)
        row = self.rows.get(subscription_id)
        return replace(row) if row else None

    def get_all(self):
        self._call("get_all")
        return [replace(r) for _, r in sorted(self.rows.items())]

    def update(self, sub):
        self._call("update", sub.id)
        if sub.id not in self.rows:
            return None
        self.rows[sub.id] = replace(sub)
        return replace(sub)

    def delete(self, subscription_id):
        self._call("delete", subscription_id)
        return self.rows.pop(subscription_id, None) is not None

    def sum_total(self, query):
        self._call("sum_total")
        total = 0
        for row in self.rows.values():
            if all(_matches(row, clause, arg) for clause, arg in zip(query.clauses, query.args)):
                total += row.price
        return total


def _matches(row: Subscription, clause: str, arg: str) -> bool:
    _, column, op, _ = clause.split()
    value = getattr(row, column)
    if value is None:
        return False
    if column in _DATE_COLUMNS:
        arg = date.fromisoformat(arg)
    else:
        value = str(value)
    return {">=": value >= arg, "<=": value <= arg, "=": value == arg}[op]


class FakeCache(SubscriptionCache):
    """Dict-backed cache storing JSON like Redis does; can be made to fail."""

    def __init__(self, events: list):
        self.events = events
        self.data: dict[str, str] = {}
        self.failing = False

    def _call(self, name: str):
        self.events.append(("cache", name))
        if self.failing:
            raise redis.ConnectionError("cache down")

    def get(self, subscription_id):
        self._call("get")
        raw = self.data.get(str(subscription_id))
        return Subscription.from_json(raw) if raw else None

    def set(self, sub):
        self._call("set")
        self.data[str(sub.id)] = sub.to_json()

    def delete(self, subscription_id):
        self._call("delete")
        self.data.pop(str(subscription_id), None)


@pytest.fixture()
def events():
    return []


@pytest.fixture()
def store(events):
    return InMemoryStore(events)


@pytest.fixture()
def cache(events):
    return FakeCache(events)


@pytest.fixture()
def repo(store, cache):
    return CachingSubscriptionRepository(store, cache)


@pytest.fixture()
def netflix():
    return Subscription(
        service_name="Netflix",
        price=999,
        user_id=USER_A,
        start_date=date(2024, 9, 1),
    )


@pytest.fixture()
def mock_db():
    """
    A ConnectionPool stand-in yielding one MagicMock connection whose
    cursor() context manager yields `cur`.
    """
    cur = MagicMock()
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cur

    class _Pool:
        @contextmanager
        def connection(self):
            yield conn

    return _Pool(), conn, cur
