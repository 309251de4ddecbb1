"""
models/total_query.py
---------------------
Builds the parameterized `SUM(price)` query used for subscription totals.

The query starts from ``WHERE 1=1`` so every filter is a plain
``AND <column> <op> <placeholder>`` suffix. Placeholders are numbered
from 1 in the order clauses are added and rendered in psycopg2's named
form (``%(p1)s``, ``%(p2)s``, ...); `params` maps those names to values.

TotalQuery is immutable: each ``with_*`` call returns a new query and
leaves the original untouched, so a partially built query can be reused.
Filters are not de-duplicated; applying one twice adds two clauses.
"""

from dataclasses import dataclass
from typing import Any, Optional

BASE_QUERY = "SELECT COALESCE(SUM(price), 0) FROM subscriptions WHERE 1=1"


@dataclass(frozen=True)
class TotalQuery:
    clauses: tuple[str, ...] = ()
    args: tuple[Any, ...] = ()

    def _with(self, column: str, op: str, value: Optional[str]) -> "TotalQuery":
        if value is None or value == "":
            return self
        index = len(self.args) + 1
        clause = f" AND {column} {op} %(p{index})s"
        return TotalQuery(self.clauses + (clause,), self.args + (value,))

    def with_start_date(self, start_date: Optional[str]) -> "TotalQuery":
        """Only subscriptions starting on or after `start_date`."""
        return self._with("start_date", ">=", start_date)

    def with_end_date(self, end_date: Optional[str]) -> "TotalQuery":
        """Only subscriptions ending on or before `end_date`."""
        return self._with("end_date", "<=", end_date)

    def with_user_id(self, user_id: Optional[str]) -> "TotalQuery":
        return self._with("user_id", "=", user_id)

    def with_service_name(self, service_name: Optional[str]) -> "TotalQuery":
        return self._with("service_name", "=", service_name)

    @property
    def params(self) -> dict[str, Any]:
        """Placeholder name → value mapping passed to cursor.execute()."""
        return {f"p{i}": value for i, value in enumerate(self.args, start=1)}

    def build(self) -> tuple[str, list[Any]]:
        """Return the query text and its arguments in placeholder order."""
        return BASE_QUERY + "".join(self.clauses), list(self.args)

    @classmethod
    def for_filters(
        cls,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        user_id: Optional[str] = None,
        service_name: Optional[str] = None,
    ) -> "TotalQuery":
        """
        Apply all four optional filters in their fixed order:
        start date, end date, user id, service name.
        """
        return (
            cls()
            .with_start_date(start_date)
            .with_end_date(end_date)
            .with_user_id(user_id)
            .with_service_name(service_name)
        )
