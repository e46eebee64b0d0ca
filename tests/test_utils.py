from datetime import date
from decimal import Decimal

import pytest

from mortgage_sim.errors import InvalidPeriod, InvalidPeriodKey
from mortgage_sim.utils import (
    add_months,
    decimal_from_str,
    iter_periods,
    months_between,
    normalize_period_key,
    parse_period_key,
    round_money,
)


def test_parse_period_key():
    assert parse_period_key("2024-02") == date(2024, 2, 1)
    assert parse_period_key(" 2024-12 ") == date(2024, 12, 1)


@pytest.mark.parametrize("key", ["2024-13", "2024-00", "2024-1", "24-01", "abcd-ef", "0000-01", "", None])
def test_parse_period_key_rejects(key):
    with pytest.raises(InvalidPeriod):
        parse_period_key(key)


def test_parse_period_key_custom_error():
    with pytest.raises(InvalidPeriodKey) as exc:
        parse_period_key("2024-13", InvalidPeriodKey)
    assert exc.value.key == "2024-13"


def test_normalize_period_key_strips_padding():
    assert normalize_period_key(" 2030-07 ") == "2030-07"
    with pytest.raises(InvalidPeriodKey):
        normalize_period_key("2030-7", InvalidPeriodKey)
    with pytest.raises(InvalidPeriod):
        normalize_period_key(202407)


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)


def test_month_arithmetic():
    assert months_between("2024-01", "2025-03") == 14
    assert months_between("2024-05", "2024-01") == -4
    assert list(iter_periods("2024-11", 4)) == ["2024-11", "2024-12", "2025-01", "2025-02"]
    assert list(iter_periods("2024-11", 0)) == []


def test_round_money_is_half_even():
    assert round_money(Decimal("0.125")) == Decimal("0.12")
    assert round_money(Decimal("0.135")) == Decimal("0.14")
    assert round_money(Decimal("8493.150684")) == Decimal("8493.15")


def test_decimal_from_str():
    assert decimal_from_str("1,000.50") == Decimal("1000.50")
    assert decimal_from_str(0.1) == Decimal("0.1")
    assert decimal_from_str(7) == Decimal("7")


@pytest.mark.parametrize("value", ["abc", "nan", "Infinity", True, None])
def test_decimal_from_str_rejects(value):
    with pytest.raises(ValueError):
        decimal_from_str(value)
