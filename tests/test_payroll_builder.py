from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from hr_payroll.errors import InvalidInput, InvalidTransition
from hr_payroll.models import PayrollStatus
from hr_payroll.processors.payroll_builder import (
    PayrollRecordBuilder,
    build_payroll_record,
    mark_paid,
    process,
)

from conftest import make_employee

NOW = datetime(2026, 2, 1, 12, 0)


def deduction_sum(record):
    return (record.social_insurance + record.health_insurance + record.income_tax
            + record.absence_deductions + record.penalties + record.advances)


class TestPayrollRecordBuilder:
    def test_full_breakdown(self, settings):
        employee = make_employee(
            overtime_hours=Decimal('10'), absence_days=Decimal('2'), monthly_incentives=Decimal('5'),
            bonus=Decimal('500'), penalties=Decimal('100'), advances=Decimal('1000'),
        )
        record = PayrollRecordBuilder(settings).build(employee, 1, 2026, created_at=NOW)

        assert record.id == "e1-2026-1"
        assert record.daily_rate == Decimal('800')
        assert record.overtime_rate == Decimal('150')
        assert record.overtime_amount == Decimal('1500')
        assert record.incentives == Decimal('800')
        assert record.total_salary == Decimal('18800')
        assert record.income_tax == Decimal('2543.75')
        assert record.absence_deductions == Decimal('1600')
        assert record.total_deductions == Decimal('7483.75')
        assert record.net_salary == Decimal('11316.25')
        assert record.working_days == Decimal('18')
        assert record.daily_rate_with_incentives == Decimal('840')
        assert record.status == PayrollStatus.PENDING
        assert record.created_at == NOW

    def test_net_salary_identity(self, settings):
        for overrides in ({}, {'absence_days': Decimal('3')}, {'advances': Decimal('2500')},
                          {'overtime_hours': Decimal('7.5'), 'monthly_incentives': Decimal('12')}):
            record = build_payroll_record(make_employee(**overrides), 3, 2026, settings)
            assert record.net_salary == record.total_salary - deduction_sum(record)
            assert record.total_deductions == deduction_sum(record)

    def test_negative_net_salary_is_kept(self, settings):
        employee = make_employee(basic_salary=Decimal('1000'), advances=Decimal('5000'))
        record = build_payroll_record(employee, 3, 2026, settings)

        assert record.net_salary < 0
        assert record.net_salary == record.total_salary - deduction_sum(record)

    def test_purchases_are_reported_but_not_deducted(self, settings):
        plain = build_payroll_record(make_employee(), 3, 2026, settings)
        with_purchases = build_payroll_record(make_employee(purchases=Decimal('300')), 3, 2026, settings)

        assert with_purchases.purchases == Decimal('300')
        assert with_purchases.net_salary == plain.net_salary

    def test_disabled_income_tax(self, settings):
        record = build_payroll_record(make_employee(), 3, 2026, replace(settings, enable_income_tax=False))
        assert record.income_tax == 0

    @pytest.mark.parametrize("month", [0, 13, "1"])
    def test_invalid_month(self, settings, month):
        with pytest.raises(InvalidInput):
            build_payroll_record(make_employee(), month, 2026, settings)

    def test_zero_salary_is_rejected(self, settings):
        with pytest.raises(InvalidInput):
            build_payroll_record(make_employee(basic_salary=Decimal('0')), 1, 2026, settings)

    def test_absence_beyond_working_days_is_rejected(self, settings):
        with pytest.raises(InvalidInput):
            build_payroll_record(make_employee(absence_days=Decimal('21')), 1, 2026, settings)

    def test_builder_is_stateless(self, settings):
        builder = PayrollRecordBuilder(settings)
        first = builder.build(make_employee(), 1, 2026)
        second = builder.build(make_employee(), 1, 2026)
        assert first == second
        assert first is not second


class TestPayrollWorkflow:
    def test_forward_path(self, settings):
        record = build_payroll_record(make_employee(), 1, 2026, settings)

        processed = process(record, "hr-1", NOW)
        assert processed.status == PayrollStatus.PROCESSED
        assert processed.processed_by == "hr-1"
        assert processed.processed_at == NOW

        paid = mark_paid(processed, "hr-2", NOW)
        assert paid.status == PayrollStatus.PAID
        assert paid.paid_by == "hr-2"
        assert paid.processed_by == "hr-1"

    def test_cannot_skip_processing(self, settings):
        record = build_payroll_record(make_employee(), 1, 2026, settings)
        with pytest.raises(InvalidTransition):
            mark_paid(record, "hr-1", NOW)
        assert record.status == PayrollStatus.PENDING

    def test_no_reverse_or_repeat(self, settings):
        paid = mark_paid(process(build_payroll_record(make_employee(), 1, 2026, settings), "hr", NOW), "hr", NOW)
        with pytest.raises(InvalidTransition):
            process(paid, "hr", NOW)
        with pytest.raises(InvalidTransition):
            mark_paid(paid, "hr", NOW)
