from decimal import Decimal
from typing import Sequence

from ..errors import InvalidConfiguration, InvalidInput
from ..models.payroll import AbsenceMode, PayrollSettings, TaxBracket
from ..utils.validators import require_non_negative, to_decimal, validate_tax_rate
from .rates import daily_rate, hourly_rate, working_calendar

MONTHS_PER_YEAR = Decimal('12')


def absence_deduction(basic_salary, absence_days, settings: PayrollSettings) -> Decimal:
    """Deduction for days absent in the period"""
    salary = require_non_negative(basic_salary, "basic_salary")
    days = require_non_negative(absence_days, "absence_days")
    if not settings.enable_absence_deductions:
        return Decimal('0')

    if AbsenceMode(settings.absence_mode) == AbsenceMode.DAILY:
        return days * daily_rate(salary, settings)

    _, hours_per_day = working_calendar(settings)
    return days * hours_per_day * hourly_rate(salary, settings)


def social_insurance(basic_salary, settings: PayrollSettings) -> Decimal:
    salary = require_non_negative(basic_salary, "basic_salary")
    if not settings.enable_social_insurance:
        return Decimal('0')
    return salary * require_non_negative(settings.social_insurance_rate, "social_insurance_rate")


def health_insurance(basic_salary, settings: PayrollSettings) -> Decimal:
    salary = require_non_negative(basic_salary, "basic_salary")
    if not settings.enable_health_insurance:
        return Decimal('0')
    return salary * require_non_negative(settings.health_insurance_rate, "health_insurance_rate")


def validate_brackets(brackets: Sequence[TaxBracket]) -> None:
    """Brackets must start at 0, be contiguous and ascending, and end unbounded"""
    if not brackets:
        raise InvalidConfiguration("At least one tax bracket is required")

    expected_min = Decimal('0')
    for index, bracket in enumerate(brackets):
        try:
            lower = to_decimal(bracket.min, "bracket.min")
            rate = to_decimal(bracket.rate, "bracket.rate")
            upper = None if bracket.max is None else to_decimal(bracket.max, "bracket.max")
        except InvalidInput as e:
            raise InvalidConfiguration(f"Tax bracket {index + 1}: {e}")

        if lower != expected_min:
            kind = "gap" if lower > expected_min else "overlap"
            raise InvalidConfiguration(
                f"Tax bracket {index + 1} starts at {lower}, expected {expected_min} ({kind})"
            )
        if not validate_tax_rate(rate):
            raise InvalidConfiguration(f"Tax bracket {index + 1} has rate {rate} outside [0, 1]")

        is_last = index == len(brackets) - 1
        if upper is None:
            if not is_last:
                raise InvalidConfiguration("Only the last tax bracket may be unbounded")
            return
        if upper <= lower:
            raise InvalidConfiguration(f"Tax bracket {index + 1} is not ascending ({lower} to {upper})")
        expected_min = upper

    raise InvalidConfiguration("The last tax bracket must be unbounded")


def bracket_tax(annual_salary, brackets: Sequence[TaxBracket]) -> Decimal:
    """Annual tax from a progressive walk through the brackets"""
    remaining = require_non_negative(annual_salary, "annual_salary")
    validate_brackets(brackets)

    tax = Decimal('0')
    for bracket in brackets:
        if remaining <= 0:
            break
        width = bracket.width
        taxable = remaining if width is None else min(remaining, width)
        tax += taxable * Decimal(str(bracket.rate))
        remaining -= taxable

    return tax


def income_tax(annual_salary, settings: PayrollSettings) -> Decimal:
    """Monthly income tax; zero whenever income tax is disabled"""
    annual = require_non_negative(annual_salary, "annual_salary")
    if not settings.enable_income_tax:
        return Decimal('0')
    return bracket_tax(annual, settings.tax_brackets) / MONTHS_PER_YEAR
