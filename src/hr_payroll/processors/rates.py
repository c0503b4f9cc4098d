"""
Rate derivation from a monthly basic salary.

All figures are unrounded Decimals; rounding happens only when a value is
displayed or exported.
"""

from decimal import Decimal
from typing import Tuple

from ..errors import InvalidConfiguration
from ..models.payroll import DailyRateMode, PayrollSettings
from ..utils.validators import require_non_negative, to_decimal


def working_calendar(settings: PayrollSettings) -> Tuple[Decimal, Decimal]:
    """Return (working days per month, working hours per day), both > 0"""
    days = to_decimal(settings.working_days_per_month, "working_days_per_month")
    hours = to_decimal(settings.working_hours_per_day, "working_hours_per_day")
    if days <= 0:
        raise InvalidConfiguration(f"working_days_per_month must be positive, got {days}")
    if hours <= 0:
        raise InvalidConfiguration(f"working_hours_per_day must be positive, got {hours}")
    return days, hours


def hourly_rate(basic_salary, settings: PayrollSettings) -> Decimal:
    """Salary per working hour, independent of the daily rate mode"""
    salary = require_non_negative(basic_salary, "basic_salary")
    days, hours = working_calendar(settings)
    return salary / days / hours


def daily_rate(basic_salary, settings: PayrollSettings) -> Decimal:
    """Daily rate per the configured mode (hourly mode yields a per-hour unit)"""
    salary = require_non_negative(basic_salary, "basic_salary")
    days, hours = working_calendar(settings)
    if DailyRateMode(settings.daily_rate_mode) == DailyRateMode.MONTHLY:
        return salary / days
    return salary / days / hours


def overtime_rate(basic_salary, settings: PayrollSettings) -> Decimal:
    """Hourly rate scaled by the overtime multiplier"""
    multiplier = require_non_negative(settings.overtime_multiplier, "overtime_multiplier")
    return hourly_rate(basic_salary, settings) * multiplier
