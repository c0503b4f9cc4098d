from decimal import Decimal, InvalidOperation as DecimalError
from typing import Any

from ..errors import InvalidInput


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """Normalise an int, float, str or Decimal into a finite Decimal"""
    if isinstance(value, bool) or value is None:
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (DecimalError, ValueError):
            raise InvalidInput(f"{name} must be a number, got {value!r}")
    if not result.is_finite():
        raise InvalidInput(f"{name} must be finite, got {value!r}")
    return result


def require_non_negative(value: Any, name: str = "value") -> Decimal:
    """Reject negative amounts"""
    amount = to_decimal(value, name)
    if amount < 0:
        raise InvalidInput(f"{name} must not be negative, got {amount}")
    return amount


def require_positive(value: Any, name: str = "value") -> Decimal:
    """Reject zero and negative amounts"""
    amount = to_decimal(value, name)
    if amount <= 0:
        raise InvalidInput(f"{name} must be greater than zero, got {amount}")
    return amount


def validate_tax_rate(rate: Decimal) -> bool:
    """Validate a marginal tax rate is a fraction between 0 and 1"""
    return Decimal('0') <= rate <= Decimal('1')


def validate_month(month: int) -> bool:
    return isinstance(month, int) and not isinstance(month, bool) and 1 <= month <= 12
