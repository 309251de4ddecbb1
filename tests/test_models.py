from datetime import date

import pytest

from models.subscription import Subscription, SubscriptionPatch
from tests.conftest import USER_A, USER_B
from utils.dates import format_month, parse_month


@pytest.fixture()
def sub():
    return Subscription("Netflix", 999, USER_A, date(2024, 9, 1), id=1)


def test_json_keeps_missing_end_date(sub):
    restored = Subscription.from_json(sub.to_json())
    assert restored == sub
    assert restored.end_date is None


def test_from_json_missing_field_raises():
    with pytest.raises(KeyError):
        Subscription.from_json('{"id": 1}')


def test_patch_apply_keeps_absent_fields(sub):
    patched = SubscriptionPatch(price=1299).apply_to(sub)
    assert patched.price == 1299
    assert patched.service_name == "Netflix"
    assert sub.price == 999


def test_patch_empty_text_means_unchanged(sub):
    patch = SubscriptionPatch(service_name="")
    assert patch.is_empty()
    assert patch.apply_to(sub) == sub


def test_patch_all_fields(sub):
    patch = SubscriptionPatch("Hulu", 1, USER_B, date(2023, 1, 1), date(2023, 3, 1))
    assert not patch.is_empty()
    assert patch.apply_to(sub) == Subscription(
        "Hulu", 1, USER_B, date(2023, 1, 1), date(2023, 3, 1), id=1
    )


def test_parse_month():
    assert parse_month("09-2024") == date(2024, 9, 1)
    assert parse_month(" 12-2025 ") == date(2025, 12, 1)


@pytest.mark.parametrize("text", ["2024-09", "13-2024", "", "2024-09-01T00:00:00Z"])
def test_parse_month_rejects_other_formats(text):
    with pytest.raises(ValueError):
        parse_month(text)


def test_format_month():
    assert format_month(date(2024, 9, 1)) == "09-2024"
    assert format_month(None) == "—"
