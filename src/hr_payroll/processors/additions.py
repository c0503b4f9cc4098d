from decimal import Decimal

from ..models.payroll import IncentiveMode, OvertimeMode, PayrollSettings
from ..utils.validators import require_non_negative
from .rates import overtime_rate


def overtime_amount(basic_salary, hours, settings: PayrollSettings) -> Decimal:
    """Overtime pay for the period"""
    salary = require_non_negative(basic_salary, "basic_salary")
    overtime_hours = require_non_negative(hours, "overtime_hours")
    if not settings.enable_overtime:
        return Decimal('0')

    if OvertimeMode(settings.overtime_mode) == OvertimeMode.HOURLY:
        return overtime_hours * overtime_rate(salary, settings)

    # Fixed mode: the multiplier is a flat amount per overtime hour
    multiplier = require_non_negative(settings.overtime_multiplier, "overtime_multiplier")
    return overtime_hours * multiplier


def incentive_amount(basic_salary, raw_incentive, settings: PayrollSettings) -> Decimal:
    """Incentive pay; percentage mode reads the input as percentage points"""
    salary = require_non_negative(basic_salary, "basic_salary")
    raw = require_non_negative(raw_incentive, "monthly_incentives")
    if not settings.enable_incentives:
        return Decimal('0')

    if IncentiveMode(settings.incentive_mode) == IncentiveMode.PERCENTAGE:
        return salary * raw / Decimal('100')
    return raw
