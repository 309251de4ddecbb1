"""
handlers/subscription_handler.py
--------------------------------
Handles subscription commands: /add, /get, /edit, /delete, /list, /total.

Arguments are validated here (ids, prices, UUIDs, MM-YYYY months) before
anything reaches SubscriptionService, which is read from
`context.bot_data[SERVICE_KEY]`.
"""

import re
from typing import Optional
from uuid import UUID

from telegram import Update
from telegram.ext import ContextTypes

from models.subscription import SubscriptionPatch
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.subscription_service import SubscriptionService
from utils.dates import parse_month
from utils.logger import get_logger

logger = get_logger(__name__)

SERVICE_KEY = "subscription_service"

# key=value pairs; a value runs until the next " key=" or the end.
_KV_PATTERN = re.compile(r"(\w+)=(.*?)(?=\s+\w+=|$)")

_EDIT_KEYS = {"service", "price", "user", "start", "end"}
_TOTAL_KEYS = {"service", "user", "start", "end"}

ADD_USAGE = (
    "📝 *Add a subscription*\n\n"
    "`/add <service> | <price> | <user uuid> | <MM-YYYY> [| <MM-YYYY>]`\n\n"
    "*Examples:*\n"
    "• `/add Netflix | 999 | 60601fee-2bf1-4721-ae6f-7636e79a0cba | 09-2024`\n"
    "• `/add Spotify | 599 | 60601fee-2bf1-4721-ae6f-7636e79a0cba | 01-2024 | 12-2024`"
)
EDIT_USAGE = (
    "✏️ *Edit a subscription*\n\n"
    "`/edit <id> service=<name> price=<n> user=<uuid> start=<MM-YYYY> end=<MM-YYYY>`\n\n"
    "Give at least one field, e.g. `/edit 1 price=1299`"
)


def _service(context: ContextTypes.DEFAULT_TYPE) -> SubscriptionService:
    return context.bot_data[SERVICE_KEY]


# ── Argument parsing ──────────────────────────────────────

def parse_id(text: str) -> int:
    """Parse a positive subscription id."""
    try:
        value = int(text)
    except ValueError:
        raise ValueError("id must be a whole number") from None
    if value <= 0:
        raise ValueError("id must be positive")
    return value


def parse_price(text: str) -> int:
    """Parse a positive integer price in minor units."""
    try:
        value = int(text.strip())
    except ValueError:
        raise ValueError("price must be a whole number") from None
    if value <= 0:
        raise ValueError("price must be positive")
    return value


def parse_user_id(text: str) -> UUID:
    try:
        return UUID(text.strip())
    except ValueError:
        raise ValueError(f"invalid user id {text.strip()!r}") from None


def parse_key_values(text: str, allowed: set[str]) -> dict[str, str]:
    """
    Parse ``key=value`` pairs. Values may contain spaces.

    Raises:
        ValueError: On text outside a pair or an unknown key.
    """
    text = text.strip()
    pairs: dict[str, str] = {}
    pos = 0
    for match in _KV_PATTERN.finditer(text):
        if text[pos:match.start()].strip():
            raise ValueError(f"cannot understand {text[pos:match.start()].strip()!r}")
        key = match.group(1).lower()
        if key not in allowed:
            raise ValueError(f"unknown field {key!r}")
        pairs[key] = match.group(2).strip()
        pos = match.end()
    if text[pos:].strip():
        raise ValueError(f"cannot understand {text[pos:].strip()!r}")
    return pairs


def parse_add_args(text: str) -> dict:
    """
    Parse ``service | price | user | start [| end]``.

    Returns:
        Keyword arguments for SubscriptionService.add_subscription.
    """
    parts = [p.strip() for p in text.split("|")]
    if len(parts) < 4 or not all(parts[:4]):
        raise ValueError("missing required fields")
    if len(parts) > 5:
        raise ValueError("too many fields")

    end_date = parse_month(parts[4]) if len(parts) == 5 and parts[4] else None
    return {
        "service_name": parts[0],
        "price": parse_price(parts[1]),
        "user_id": parse_user_id(parts[2]),
        "start_date": parse_month(parts[3]),
        "end_date": end_date,
    }


def parse_patch(pairs: dict[str, str]) -> SubscriptionPatch:
    """Build a SubscriptionPatch from /edit pairs; empty values are ignored."""
    def present(key: str) -> Optional[str]:
        return pairs.get(key) or None

    price, user, start, end = (present(k) for k in ("price", "user", "start", "end"))
    return SubscriptionPatch(
        service_name=present("service"),
        price=parse_price(price) if price else None,
        user_id=parse_user_id(user) if user else None,
        start_date=parse_month(start) if start else None,
        end_date=parse_month(end) if end else None,
    )


def parse_total_filters(pairs: dict[str, str]) -> dict:
    """Turn /total pairs into keyword arguments for SubscriptionService.get_total."""
    start, end, user = pairs.get("start"), pairs.get("end"), pairs.get("user")
    return {
        "start_date": parse_month(start) if start else None,
        "end_date": parse_month(end) if end else None,
        "user_id": parse_user_id(user) if user else None,
        "service_name": pairs.get("service") or None,
    }


# ── Commands ──────────────────────────────────────────────

@authorized_only
@rate_limited
async def add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add <service> | <price> | <user> | <start> [| <end>]."""
    if not context.args:
        await update.message.reply_text(ADD_USAGE, parse_mode="Markdown")
        return

    try:
        fields = parse_add_args(" ".join(context.args))
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}.")
        return

    msg = _service(context).add_subscription(**fields)
    await update.message.reply_text(msg)


@authorized_only
@rate_limited
async def get_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /get <id> - show one subscription.
    Usage: /get 1
    """
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /get <id>\nExample: /get 1")
        return

    try:
        subscription_id = parse_id(context.args[0])
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}.")
        return

    msg = _service(context).get_subscription(subscription_id)
    await update.message.reply_text(msg)


@authorized_only
@rate_limited
async def edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /edit <id> key=value ... - change some fields of a subscription.

    Examples:
        /edit 1 price=1299
        /edit 2 service=Amazon Prime end=12-2025
    """
    if not context.args:
        await update.message.reply_text(EDIT_USAGE, parse_mode="Markdown")
        return

    try:
        subscription_id = parse_id(context.args[0])
        patch = parse_patch(parse_key_values(" ".join(context.args[1:]), _EDIT_KEYS))
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}.")
        return

    msg = _service(context).edit_subscription(subscription_id, patch)
    await update.message.reply_text(msg)


@authorized_only
@rate_limited
async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /delete <id> - delete a subscription.
    Usage: /delete 1
    """
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /delete <id>\nExample: /delete 1")
        return

    try:
        subscription_id = parse_id(context.args[0])
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}.")
        return

    msg = _service(context).delete_subscription(subscription_id)
    await update.message.reply_text(msg)


@authorized_only
@rate_limited
async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /list - show every subscription."""
    msg = _service(context).list_subscriptions()
    await update.message.reply_text(msg)


@authorized_only
@rate_limited
async def total_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /total [start=MM-YYYY] [end=MM-YYYY] [user=<uuid>] [service=<name>].

    Without filters it sums every subscription.
    """
    try:
        pairs = parse_key_values(" ".join(context.args or []), _TOTAL_KEYS)
        filters = parse_total_filters(pairs)
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}.")
        return

    msg = _service(context).get_total(**filters)
    await update.message.reply_text(msg)
