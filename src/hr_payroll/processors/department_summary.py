from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ..models.employee import Employee
from ..models.payroll import PayrollRecord, PayrollSettings, PayrollStatus
from .payroll_builder import PayrollRecordBuilder


@dataclass(frozen=True)
class PayrollSummary:
    """Totals over a set of payroll records"""
    total_basic_salary: Decimal = Decimal('0')
    total_incentives: Decimal = Decimal('0')
    total_deductions: Decimal = Decimal('0')
    total_net_salary: Decimal = Decimal('0')
    employee_count: int = 0
    processed_count: int = 0
    pending_count: int = 0


def summarize_payroll(records: Iterable[PayrollRecord]) -> PayrollSummary:
    """Sum basic salary, incentives, deductions and net salary"""
    totals = {
        'basic': Decimal('0'),
        'incentives': Decimal('0'),
        'deductions': Decimal('0'),
        'net': Decimal('0'),
    }
    count = processed = pending = 0

    for record in records:
        totals['basic'] += record.basic_salary
        totals['incentives'] += record.incentives
        totals['deductions'] += record.total_salary - record.net_salary
        totals['net'] += record.net_salary
        count += 1
        status = PayrollStatus(record.status)
        if status == PayrollStatus.PENDING:
            pending += 1
        else:
            processed += 1

    return PayrollSummary(
        total_basic_salary=totals['basic'],
        total_incentives=totals['incentives'],
        total_deductions=totals['deductions'],
        total_net_salary=totals['net'],
        employee_count=count,
        processed_count=processed,
        pending_count=pending,
    )


def department_payroll(employees: Iterable[Employee], settings: PayrollSettings, month: int, year: int,
                       department_id: Optional[str] = None) -> PayrollSummary:
    """Projected payroll totals for a department (or everyone) without storing records"""
    builder = PayrollRecordBuilder(settings)
    selected = [
        e for e in employees
        if department_id is None or (e.position and e.position.department_id == department_id)
    ]
    return summarize_payroll(builder.build(e, month, year) for e in selected)
