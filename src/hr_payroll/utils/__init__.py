from .clock import FixedClock, SystemClock
from .formatters import format_currency, format_date, format_percentage, format_period, round_money
from .validators import require_non_negative, require_positive, to_decimal

__all__ = [
    'FixedClock',
    'SystemClock',
    'format_currency',
    'format_date',
    'format_percentage',
    'format_period',
    'round_money',
    'require_non_negative',
    'require_positive',
    'to_decimal',
]
