"""
Payroll record construction and the payroll status workflow.

The builder is a stateless factory: building the same employee and period
twice yields two independent records. Preventing duplicate generation is the
state store's job.
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional

from ..errors import InvalidInput, InvalidTransition
from ..models.employee import Employee
from ..models.payroll import PayrollRecord, PayrollSettings, PayrollStatus, payroll_record_id
from ..utils.validators import require_non_negative, require_positive, validate_month
from .additions import incentive_amount, overtime_amount
from .deductions import absence_deduction, health_insurance, income_tax, social_insurance
from .rates import daily_rate, overtime_rate, working_calendar

# Allowed forward moves; anything else is an InvalidTransition
PAYROLL_TRANSITIONS: Dict[PayrollStatus, PayrollStatus] = {
    PayrollStatus.PENDING: PayrollStatus.PROCESSED,
    PayrollStatus.PROCESSED: PayrollStatus.PAID,
}


class PayrollRecordBuilder:
    """Compose rates, additions and deductions into one payroll record"""

    def __init__(self, settings: PayrollSettings):
        self.settings = settings

    def build(self, employee: Employee, month: int, year: int,
              created_at: Optional[datetime] = None) -> PayrollRecord:
        """Build a pending payroll record for the given period"""
        if not validate_month(month):
            raise InvalidInput(f"Month must be between 1 and 12, got {month!r}")
        if not isinstance(year, int) or isinstance(year, bool) or year < 1:
            raise InvalidInput(f"Invalid year {year!r}")

        settings = self.settings
        basic = require_positive(employee.basic_salary, "basic_salary")
        absence_days = require_non_negative(employee.absence_days, "absence_days")
        overtime_hours = require_non_negative(employee.overtime_hours, "overtime_hours")
        monthly_incentives = require_non_negative(employee.monthly_incentives, "monthly_incentives")
        bonus = require_non_negative(employee.bonus, "bonus")
        penalties = require_non_negative(employee.penalties, "penalties")
        advances = require_non_negative(employee.advances, "advances")

        working_days, _ = working_calendar(settings)
        if absence_days > working_days:
            raise InvalidInput(
                f"absence_days ({absence_days}) exceeds the {working_days} working days of the period"
            )

        # Rates
        day_rate = daily_rate(basic, settings)
        ot_rate = overtime_rate(basic, settings)

        # Additions
        overtime = overtime_amount(basic, overtime_hours, settings)
        incentives = incentive_amount(basic, monthly_incentives, settings)

        # Deductions
        social = social_insurance(basic, settings)
        health = health_insurance(basic, settings)
        absence = absence_deduction(basic, absence_days, settings)
        tax = income_tax(basic * 12, settings)

        total_salary = basic + incentives + overtime + bonus
        total_deductions = social + health + tax + absence + penalties + advances

        return PayrollRecord(
            id=payroll_record_id(employee.id, month, year),
            employee_id=employee.id,
            employee_code=employee.code or '',
            employee_name=employee.name,
            position=employee.position.title if employee.position else '',
            month=month,
            year=year,
            basic_salary=basic,
            daily_rate=day_rate,
            overtime_rate=ot_rate,
            working_days=working_days - absence_days,
            absent_days=absence_days,
            overtime_hours=overtime_hours,
            incentives=incentives,
            bonus=bonus,
            overtime_amount=overtime,
            monthly_incentives=monthly_incentives,
            total_salary=total_salary,
            social_insurance=social,
            health_insurance=health,
            income_tax=tax,
            absence_deductions=absence,
            penalties=penalties,
            penalty_days=require_non_negative(employee.penalty_days, "penalty_days"),
            advances=advances,
            purchases=require_non_negative(employee.purchases, "purchases"),
            hourly_deductions=require_non_negative(employee.hourly_deductions, "hourly_deductions"),
            total_deductions=total_deductions,
            # Negative net salary is reported as-is
            net_salary=total_salary - total_deductions,
            daily_rate_with_incentives=day_rate + incentives / working_days,
            status=PayrollStatus.PENDING,
            created_at=created_at,
        )


def _advance(record: PayrollRecord, target: PayrollStatus) -> None:
    current = PayrollStatus(record.status)
    if PAYROLL_TRANSITIONS.get(current) != target:
        raise InvalidTransition(
            f"Payroll record {record.id} cannot move from {current.value} to {target.value}"
        )


def process(record: PayrollRecord, actor_id: str, now: datetime) -> PayrollRecord:
    """pending -> processed"""
    _advance(record, PayrollStatus.PROCESSED)
    return replace(record, status=PayrollStatus.PROCESSED, processed_at=now, processed_by=actor_id)


def mark_paid(record: PayrollRecord, actor_id: str, now: datetime) -> PayrollRecord:
    """processed -> paid"""
    _advance(record, PayrollStatus.PAID)
    return replace(record, status=PayrollStatus.PAID, paid_at=now, paid_by=actor_id)


def build_payroll_record(employee: Employee, month: int, year: int, settings: PayrollSettings,
                         created_at: Optional[datetime] = None) -> PayrollRecord:
    """Convenience wrapper around PayrollRecordBuilder"""
    return PayrollRecordBuilder(settings).build(employee, month, year, created_at=created_at)
