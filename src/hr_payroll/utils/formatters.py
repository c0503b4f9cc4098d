from decimal import Decimal, ROUND_HALF_UP
from datetime import date

from ..config.settings import CURRENCY_SYMBOL

CENT = Decimal('0.01')


def round_money(amount: Decimal) -> Decimal:
    """Round to whole cents for display and export"""
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format currency amount"""
    return f"{round_money(amount):,.2f} {symbol}"


def format_date(d: date) -> str:
    """Format date in ISO style"""
    return d.strftime("%Y-%m-%d")


def format_percentage(rate: Decimal) -> str:
    """Format a fractional rate (0.025) as a percentage"""
    return f"{Decimal(str(rate)) * 100:.2f}%"


def format_period(month: int, year: int) -> str:
    return f"{year}-{month:02d}"
