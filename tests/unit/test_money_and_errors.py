"""Unit tests for the shared money helpers and error translation."""

from decimal import Decimal, InvalidOperation

import pytest
from libs.common.currency import (
    money_to_float,
    parse_exact_money,
    percent_of,
    to_money,
)
from libs.common.error_handler import integrity_error_message
from sqlalchemy.exc import IntegrityError


# ---------------------------------------------------------------------------
# currency
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,expected",
    [
        (None, Decimal("0.00")),
        (10, Decimal("10.00")),
        (0.1, Decimal("0.10")),
        ("25.5", Decimal("25.50")),
        (Decimal("1.005"), Decimal("1.01")),
    ],
)
def test_to_money(value, expected):
    assert to_money(value) == expected


@pytest.mark.unit
@pytest.mark.parametrize("value", ["NaN", float("nan"), float("inf"), "-Infinity"])
def test_to_money_rejects_non_finite(value):
    with pytest.raises(InvalidOperation):
        to_money(value)


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,expected",
    [
        (30, Decimal("30.00")),
        (10.5, Decimal("10.50")),
        ("12.34", Decimal("12.34")),
        (Decimal("7.10"), Decimal("7.10")),
    ],
)
def test_parse_exact_money_accepts_whole_cents(value, expected):
    assert parse_exact_money(value) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "value",
    [None, "ten dollars", 10.004, "12.345", float("nan"), float("inf"), "1e40"],
)
def test_parse_exact_money_rejects_unusable_amounts(value):
    assert parse_exact_money(value) is None


@pytest.mark.unit
def test_percent_of_half():
    assert percent_of(199, 50) == Decimal("99.50")
    assert percent_of("0.03", 50) == Decimal("0.02")


@pytest.mark.unit
def test_money_to_float():
    assert money_to_float(Decimal("42.50")) == 42.5


# ---------------------------------------------------------------------------
# IntegrityError messages
# ---------------------------------------------------------------------------


class _Orig(Exception):
    pass


@pytest.mark.unit
@pytest.mark.parametrize(
    "driver_message,expected",
    [
        (
            'duplicate key value violates unique constraint "users_username_key"\n'
            "DETAIL:  Key (username)=(alice) already exists.",
            "Username already exists",
        ),
        (
            "UNIQUE constraint failed: users.wallet_address",
            "Wallet address already exists",
        ),
        ("UNIQUE constraint failed: referrals.referred_user_id", "Referred user already exists"),
        ("CHECK constraint failed: ck_user_wallet_balance_non_negative", "Duplicate or invalid value"),
    ],
)
def test_integrity_error_message(driver_message, expected):
    exc = IntegrityError("INSERT ...", {}, _Orig(driver_message))

    assert integrity_error_message(exc) == expected
