from datetime import date
from decimal import Decimal

import pytest

from hr_payroll.errors import InvalidInput
from hr_payroll.utils import (
    format_currency,
    format_date,
    format_percentage,
    format_period,
    require_non_negative,
    require_positive,
    round_money,
    to_decimal,
)


def test_round_money_is_half_up():
    assert round_money(Decimal('2.345')) == Decimal('2.35')
    assert round_money(Decimal('-2.345')) == Decimal('-2.35')
    assert round_money(Decimal('10000') / 3) == Decimal('3333.33')


def test_format_currency():
    assert format_currency(Decimal('1234567.891')) == "1,234,567.89 EGP"
    assert format_currency(Decimal('5'), symbol="USD") == "5.00 USD"


def test_format_helpers():
    assert format_date(date(2026, 3, 9)) == "2026-03-09"
    assert format_percentage(Decimal('0.025')) == "2.50%"
    assert format_period(3, 2026) == "2026-03"


def test_to_decimal_accepts_numbers_and_strings():
    assert to_decimal(0.1) == Decimal('0.1')
    assert to_decimal("250.50") == Decimal('250.50')
    assert to_decimal(7) == Decimal('7')


@pytest.mark.parametrize("value", [None, True, "ten", float('nan'), float('inf')])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(InvalidInput):
        to_decimal(value)


def test_sign_checks():
    assert require_non_negative(0) == 0
    with pytest.raises(InvalidInput):
        require_non_negative(-0.01)
    with pytest.raises(InvalidInput):
        require_positive(0)
