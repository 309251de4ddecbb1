import asyncio
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

import config
from handlers import subscription_handler as h
from models.subscription import SubscriptionPatch
from security import rate_limiter
from tests.conftest import USER_A


# ── Parsers ───────────────────────────────────────────────

def test_parse_add_args():
    fields = h.parse_add_args(f"Netflix | 999 | {USER_A} | 09-2024")
    assert fields == {
        "service_name": "Netflix",
        "price": 999,
        "user_id": USER_A,
        "start_date": date(2024, 9, 1),
        "end_date": None,
    }


def test_parse_add_args_with_end_and_spaces():
    fields = h.parse_add_args(f"Amazon Prime | 899 | {USER_A} | 01-2024 | 12-2024")
    assert fields["service_name"] == "Amazon Prime"
    assert fields["end_date"] == date(2024, 12, 1)


@pytest.mark.parametrize("text", [
    "Netflix | 999",
    f"Netflix | 0 | {USER_A} | 09-2024",
    f"Netflix | abc | {USER_A} | 09-2024",
    "Netflix | 999 | not-a-uuid | 09-2024",
    f"Netflix | 999 | {USER_A} | 2024-09-01",
    f" | 999 | {USER_A} | 09-2024",
])
def test_parse_add_args_rejects_bad_input(text):
    with pytest.raises(ValueError):
        h.parse_add_args(text)


def test_parse_key_values_allows_spaces_in_values():
    pairs = h.parse_key_values("price=1299 service=Amazon Prime end=12-2025", {"price", "service", "end"})
    assert pairs == {"price": "1299", "service": "Amazon Prime", "end": "12-2025"}


@pytest.mark.parametrize("text", ["price", "colour=red", "junk price=1"])
def test_parse_key_values_rejects(text):
    with pytest.raises(ValueError):
        h.parse_key_values(text, {"price"})


def test_parse_patch():
    patch = h.parse_patch({"price": "1299", "start": "10-2024", "service": ""})
    assert patch == SubscriptionPatch(price=1299, start_date=date(2024, 10, 1))


def test_parse_total_filters():
    filters = h.parse_total_filters({"start": "01-2024", "user": str(USER_A), "service": "Netflix"})
    assert filters == {
        "start_date": date(2024, 1, 1),
        "end_date": None,
        "user_id": USER_A,
        "service_name": "Netflix",
    }


@pytest.mark.parametrize("text", ["0", "-3", "x"])
def test_parse_id_rejects(text):
    with pytest.raises(ValueError):
        h.parse_id(text)


# ── Commands ──────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _open_bot(monkeypatch):
    monkeypatch.setattr(config, "ALLOWED_USER_IDS", [])
    monkeypatch.setattr(rate_limiter, "limiter", rate_limiter.SlidingWindowLimiter(100, 60))


def _run(command, args, service, user_id=1):
    update = SimpleNamespace(
        effective_user=SimpleNamespace(id=user_id, username="u", first_name="U"),
        message=SimpleNamespace(reply_text=AsyncMock()),
    )
    context = SimpleNamespace(args=args, bot_data={h.SERVICE_KEY: service})
    asyncio.run(command(update, context))
    return update.message.reply_text


def test_add_command_calls_service():
    service = MagicMock()
    service.add_subscription.return_value = "ok"

    reply = _run(h.add_command, ["Netflix", "|", "999", "|", str(USER_A), "|", "09-2024"], service)

    service.add_subscription.assert_called_once_with(
        service_name="Netflix", price=999, user_id=USER_A,
        start_date=date(2024, 9, 1), end_date=None,
    )
    reply.assert_awaited_once_with("ok")


def test_add_command_invalid_input_skips_service():
    service = MagicMock()
    reply = _run(h.add_command, ["Netflix", "|", "999"], service)
    service.add_subscription.assert_not_called()
    assert "missing required fields" in reply.await_args.args[0]


def test_edit_command():
    service = MagicMock()
    service.edit_subscription.return_value = "edited"
    _run(h.edit_command, ["1", "price=1299"], service)
    service.edit_subscription.assert_called_once_with(1, SubscriptionPatch(price=1299))


def test_total_command_without_args():
    service = MagicMock()
    service.get_total.return_value = "💶 Total: 0"
    reply = _run(h.total_command, [], service)
    service.get_total.assert_called_once_with(
        start_date=None, end_date=None, user_id=None, service_name=None
    )
    reply.assert_awaited_once_with("💶 Total: 0")


def test_get_command_bad_id():
    service = MagicMock()
    reply = _run(h.get_command, ["abc"], service)
    service.get_subscription.assert_not_called()
    assert "whole number" in reply.await_args.args[0]


def test_unlisted_user_is_rejected(monkeypatch):
    monkeypatch.setattr(config, "ALLOWED_USER_IDS", [42])
    service = MagicMock()
    reply = _run(h.list_command, [], service, user_id=7)
    service.list_subscriptions.assert_not_called()
    assert "private" in reply.await_args.args[0]


def test_rate_limit_blocks_handler(monkeypatch):
    monkeypatch.setattr(rate_limiter, "limiter", rate_limiter.SlidingWindowLimiter(1, 60))
    service = MagicMock()
    service.list_subscriptions.return_value = "list"
    _run(h.list_command, [], service)
    reply = _run(h.list_command, [], service)
    assert service.list_subscriptions.call_count == 1
    assert "Too many" in reply.await_args.args[0]


def test_sliding_window_expires_old_calls():
    limiter = rate_limiter.SlidingWindowLimiter(2, 10)
    assert limiter.allow(1, now=0)
    assert limiter.allow(1, now=1)
    assert not limiter.allow(1, now=5)
    assert limiter.allow(2, now=5)
    assert limiter.allow(1, now=10.5)
