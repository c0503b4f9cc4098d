from dataclasses import replace

from ..errors import InvalidConfiguration, InvalidInput
from ..models.payroll import (
    AbsenceMode,
    DailyRateMode,
    IncentiveMode,
    OvertimeMode,
    PayrollSettings,
    TaxBracket,
)
from ..utils.validators import to_decimal
from .deductions import validate_brackets
from .rates import working_calendar

RATE_FIELDS = ('social_insurance_rate', 'health_insurance_rate', 'overtime_multiplier')

MODE_FIELDS = {
    'daily_rate_mode': DailyRateMode,
    'incentive_mode': IncentiveMode,
    'absence_mode': AbsenceMode,
    'overtime_mode': OvertimeMode,
}


def validate_settings(settings: PayrollSettings) -> PayrollSettings:
    """Return the settings with enums and Decimals normalised, or raise InvalidConfiguration"""
    changes = {}
    for name, enum_type in MODE_FIELDS.items():
        try:
            changes[name] = enum_type(getattr(settings, name))
        except ValueError:
            raise InvalidConfiguration(f"Unknown {name} {getattr(settings, name)!r}")

    try:
        for name in RATE_FIELDS:
            value = to_decimal(getattr(settings, name), name)
            if value < 0:
                raise InvalidConfiguration(f"{name} must not be negative, got {value}")
            changes[name] = value
        days, hours = working_calendar(settings)
        brackets = tuple(
            TaxBracket(
                min=to_decimal(b.min, "bracket.min"),
                max=None if b.max is None else to_decimal(b.max, "bracket.max"),
                rate=to_decimal(b.rate, "bracket.rate"),
            )
            for b in settings.tax_brackets
        )
    except InvalidInput as e:
        raise InvalidConfiguration(str(e))

    # Bracket contents only matter while income tax is charged
    if settings.enable_income_tax:
        validate_brackets(brackets)

    changes.update(working_days_per_month=days, working_hours_per_day=hours, tax_brackets=brackets)
    return replace(settings, **changes)
