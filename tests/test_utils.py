"""Tests for date, number and rounding helpers."""

from datetime import date
from decimal import Decimal

import pytest

from loan_amortization.data_models import RoundingRule
from loan_amortization.rounding import policy_for
from loan_amortization.utils import add_months, ceil_div, parse_date, round_money, to_decimal


def test_add_months_clamps_day() -> None:
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
    assert add_months(date(2024, 1, 15), 12) == date(2025, 1, 15)


def test_parse_date() -> None:
    assert parse_date("2024-02-29") == date(2024, 2, 29)
    assert parse_date("2024-05") == date(2024, 5, 1)
    with pytest.raises(ValueError):
        parse_date("May 2024")


def test_to_decimal() -> None:
    assert to_decimal("1,250.50") == Decimal("1250.50")
    assert to_decimal("5.5%") == Decimal("5.5")
    assert to_decimal(0.1) == Decimal("0.1")
    for bad in (True, "nan", "", None, float("nan"), float("-inf"), Decimal("NaN"), Decimal("Infinity")):
        with pytest.raises(ValueError):
            to_decimal(bad)


def test_round_money_half_away_from_zero() -> None:
    assert round_money(Decimal("2.345")) == Decimal("2.35")
    assert round_money(Decimal("2.344")) == Decimal("2.34")
    assert round_money(Decimal("-2.345")) == Decimal("-2.35")


def test_ceil_div() -> None:
    assert ceil_div(12, 3) == 4
    assert ceil_div(13, 3) == 5
    assert ceil_div(0, 3) == 0


def test_rounding_policies() -> None:
    principal, interest = Decimal("812.3456"), Decimal("45.8333")
    assert policy_for(RoundingRule.ROUND_EACH).apply(principal, interest) == (
        Decimal("812.35"),
        Decimal("45.83"),
    )
    assert policy_for(RoundingRule.ROUND_END).apply(principal, interest) == (principal, interest)
    assert policy_for(RoundingRule.ADJUST_LAST).apply(principal, interest) == (
        Decimal("812.35"),
        Decimal("45.83"),
    )
    assert policy_for(RoundingRule.ROUND_END).finalize_total(Decimal("1.005")) == Decimal("1.01")
