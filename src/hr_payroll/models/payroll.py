from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class DailyRateMode(str, Enum):
    MONTHLY = "monthly"
    HOURLY = "hourly"


class IncentiveMode(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class AbsenceMode(str, Enum):
    DAILY = "daily"
    HOURLY = "hourly"


class OvertimeMode(str, Enum):
    HOURLY = "hourly"
    FIXED = "fixed"


class PayrollStatus(str, Enum):
    """Payroll record workflow: pending -> processed -> paid"""
    PENDING = "pending"
    PROCESSED = "processed"
    PAID = "paid"


@dataclass(frozen=True)
class TaxBracket:
    """Annual income band taxed at a marginal rate; max=None is unbounded"""
    min: Decimal
    max: Optional[Decimal]
    rate: Decimal

    @property
    def width(self) -> Optional[Decimal]:
        if self.max is None:
            return None
        return Decimal(str(self.max)) - Decimal(str(self.min))


DEFAULT_TAX_BRACKETS = (
    TaxBracket(Decimal('0'), Decimal('15000'), Decimal('0')),
    TaxBracket(Decimal('15000'), Decimal('30000'), Decimal('0.025')),
    TaxBracket(Decimal('30000'), Decimal('45000'), Decimal('0.10')),
    TaxBracket(Decimal('45000'), Decimal('60000'), Decimal('0.15')),
    TaxBracket(Decimal('60000'), Decimal('200000'), Decimal('0.20')),
    TaxBracket(Decimal('200000'), Decimal('400000'), Decimal('0.225')),
    TaxBracket(Decimal('400000'), None, Decimal('0.25')),
)


@dataclass(frozen=True)
class PayrollSettings:
    """Process-wide payroll configuration read by every calculation"""
    # Rates
    social_insurance_rate: Decimal = Decimal('0.11')
    health_insurance_rate: Decimal = Decimal('0.03')
    overtime_multiplier: Decimal = Decimal('1.5')
    working_days_per_month: Decimal = Decimal('22')
    working_hours_per_day: Decimal = Decimal('8')
    daily_rate_mode: DailyRateMode = DailyRateMode.MONTHLY
    incentive_mode: IncentiveMode = IncentiveMode.PERCENTAGE

    tax_brackets: Tuple[TaxBracket, ...] = DEFAULT_TAX_BRACKETS

    # Deductions
    enable_social_insurance: bool = True
    enable_health_insurance: bool = True
    enable_income_tax: bool = True
    enable_absence_deductions: bool = True
    absence_mode: AbsenceMode = AbsenceMode.DAILY

    # Additions
    enable_overtime: bool = True
    enable_incentives: bool = True
    overtime_mode: OvertimeMode = OvertimeMode.HOURLY


@dataclass(frozen=True)
class PayrollRecord:
    """Computed salary breakdown for one employee and one month"""
    id: str
    employee_id: str
    employee_code: str
    employee_name: str
    position: str
    month: int
    year: int

    # Basic salary components
    basic_salary: Decimal
    daily_rate: Decimal
    overtime_rate: Decimal

    # Work details
    working_days: Decimal
    absent_days: Decimal
    overtime_hours: Decimal

    # Additions
    incentives: Decimal
    bonus: Decimal
    overtime_amount: Decimal
    monthly_incentives: Decimal
    total_salary: Decimal

    # Deductions
    social_insurance: Decimal
    health_insurance: Decimal
    income_tax: Decimal
    absence_deductions: Decimal
    penalties: Decimal
    penalty_days: Decimal
    advances: Decimal
    purchases: Decimal
    hourly_deductions: Decimal
    total_deductions: Decimal

    # Final calculations
    net_salary: Decimal
    daily_rate_with_incentives: Decimal

    status: PayrollStatus = PayrollStatus.PENDING
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    paid_at: Optional[datetime] = None
    paid_by: Optional[str] = None

    @property
    def period(self) -> Tuple[str, int, int]:
        return (self.employee_id, self.month, self.year)


def payroll_record_id(employee_id: str, month: int, year: int) -> str:
    """Composite identity of a payroll record"""
    return f"{employee_id}-{year}-{month}"
