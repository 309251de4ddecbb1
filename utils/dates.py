"""
utils/dates.py
--------------
Month-granularity date helpers.

Subscriptions start and end on calendar months. The single accepted
text format is ``MM-YYYY`` (e.g. ``09-2024``); it is stored as the first
day of that month.
"""

from datetime import date, datetime
from typing import Optional

MONTH_FORMAT = "%m-%Y"


def parse_month(text: str) -> date:
    """
    Parse ``MM-YYYY`` into the first day of that month.

    Raises:
        ValueError: If the text is not in ``MM-YYYY`` form.
    """
    value = (text or "").strip()
    try:
        return datetime.strptime(value, MONTH_FORMAT).date()
    except ValueError:
        raise ValueError(f"invalid month {text!r}, expected MM-YYYY") from None


def format_month(value: Optional[date]) -> str:
    """Render a stored date back as ``MM-YYYY`` ('—' when absent)."""
    if value is None:
        return "—"
    return value.strftime(MONTH_FORMAT)
