from datetime import date, datetime
from decimal import Decimal, ROUND_CEILING

import pytest

from hr_payroll.errors import InvalidInput, InvalidOperation, InvalidTransition
from hr_payroll.models import AdvanceStatus, InstallmentStatus
from hr_payroll.processors import advance_engine
from hr_payroll.processors.advance_engine import (
    add_months,
    approve,
    delete_advance,
    mark_overdue,
    pay_installment,
    recompute_derived_status,
    reject,
    request_advance,
)

REQUESTED = datetime(2026, 1, 10, 11, 30)


def approved_advance(amount=1000, count=3, requested=REQUESTED):
    advance, installments = request_advance("e1", amount, "Medical bills", count, requested, advance_id="adv-1")
    return approve(advance, "manager", requested), installments


class TestSchedule:
    def test_uneven_split(self):
        advance, installments = request_advance("e1", 1000, "Rent", 3, REQUESTED)
        assert [i.amount for i in installments] == [Decimal('334'), Decimal('334'), Decimal('332')]
        assert advance.remaining_amount == Decimal('1000')
        assert advance.status == AdvanceStatus.PENDING

    def test_single_installment_holds_the_full_amount(self):
        _, installments = request_advance("e1", Decimal('1234.56'), "Rent", 1, REQUESTED)
        assert [i.amount for i in installments] == [Decimal('1234.56')]

    @pytest.mark.parametrize("amount", ["7", "1000", "1234.56", "99999"])
    def test_installments_sum_exactly(self, amount):
        amount = Decimal(amount)
        for count in range(1, 25):
            per_installment = (amount / count).to_integral_value(rounding=ROUND_CEILING)
            if per_installment * (count - 1) >= amount:
                with pytest.raises(InvalidInput):
                    request_advance("e1", amount, "Loan", count, REQUESTED)
                continue

            _, installments = request_advance("e1", amount, "Loan", count, REQUESTED)
            assert len(installments) == count
            assert sum(i.amount for i in installments) == amount
            assert all(i.amount == per_installment for i in installments[:-1])
            assert all(i.amount > 0 for i in installments)
            assert all(i.status == InstallmentStatus.PENDING for i in installments)

    @pytest.mark.parametrize("amount, count", [(1, 3), (4, 3), (7, 5), (Decimal('0.5'), 2)])
    def test_count_leaving_nothing_for_the_last_installment(self, amount, count):
        with pytest.raises(InvalidInput):
            request_advance("e1", amount, "Loan", count, REQUESTED)

    def test_smallest_amount_that_fits(self):
        advance, installments = request_advance("e1", 3, "Loan", 3, REQUESTED)
        assert [i.amount for i in installments] == [1, 1, 1]
        advance_engine.check_installment_sum(advance, installments)

    def test_numbering_and_ids(self):
        _, installments = request_advance("e1", 900, "Loan", 3, REQUESTED, advance_id="adv-9")
        assert [i.number for i in installments] == [1, 2, 3]
        assert [i.id for i in installments] == ["adv-9-1", "adv-9-2", "adv-9-3"]
        assert all(i.advance_id == "adv-9" for i in installments)

    def test_due_dates_follow_request_month(self):
        _, installments = request_advance("e1", 900, "Loan", 3, REQUESTED)
        assert [i.due_date for i in installments] == [date(2026, 2, 10), date(2026, 3, 10), date(2026, 4, 10)]

    def test_due_dates_clamp_to_month_end(self):
        _, installments = request_advance("e1", 900, "Loan", 3, datetime(2026, 1, 31))
        assert [i.due_date for i in installments] == [date(2026, 2, 28), date(2026, 3, 31), date(2026, 4, 30)]

    def test_leap_year_clamp(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2025, 12, 15), 2) == date(2026, 2, 15)

    @pytest.mark.parametrize("amount", [0, -100, "abc", None])
    def test_invalid_amount(self, amount):
        with pytest.raises(InvalidInput):
            request_advance("e1", amount, "Loan", 3, REQUESTED)

    @pytest.mark.parametrize("count", [0, -1, 2.5, True])
    def test_invalid_count(self, count):
        with pytest.raises(InvalidInput):
            request_advance("e1", 1000, "Loan", count, REQUESTED)


class TestDecisions:
    def test_approve_records_actor(self):
        advance, _ = approved_advance()
        assert advance.status == AdvanceStatus.APPROVED
        assert advance.approved_by == "manager"
        assert advance.approval_date == REQUESTED

    def test_reject_is_terminal(self):
        advance, _ = request_advance("e1", 1000, "Loan", 2, REQUESTED)
        rejected = reject(advance, "manager", REQUESTED)
        assert rejected.status == AdvanceStatus.REJECTED
        with pytest.raises(InvalidTransition):
            approve(rejected, "manager", REQUESTED)

    def test_cannot_decide_twice(self):
        advance, _ = approved_advance()
        with pytest.raises(InvalidTransition):
            reject(advance, "manager", REQUESTED)

    def test_only_pending_advances_can_be_deleted(self):
        pending, _ = request_advance("e1", 1000, "Loan", 2, REQUESTED)
        delete_advance(pending)
        advance, _ = approved_advance()
        with pytest.raises(InvalidOperation):
            delete_advance(advance)


class TestPayments:
    def test_partial_then_full_payment(self):
        advance, installments = approved_advance()
        advance, first = pay_installment(advance, installments[0], 100, date(2026, 2, 1))
        assert first.paid_amount == Decimal('100')
        assert first.status == InstallmentStatus.PENDING
        assert advance.remaining_amount == Decimal('900')

        advance, first = pay_installment(advance, first, 234, date(2026, 2, 5))
        assert first.status == InstallmentStatus.PAID
        assert first.paid_date == date(2026, 2, 5)
        assert advance.remaining_amount == Decimal('666')

    def test_overpayment_is_rejected(self):
        advance, installments = approved_advance()
        with pytest.raises(InvalidInput):
            pay_installment(advance, installments[0], 335, date(2026, 2, 1))

    def test_pending_advance_cannot_be_paid(self):
        advance, installments = request_advance("e1", 1000, "Loan", 3, REQUESTED)
        with pytest.raises(InvalidOperation):
            pay_installment(advance, installments[0], 334, date(2026, 2, 1))

    def test_paid_installment_cannot_be_paid_again(self):
        advance, installments = approved_advance()
        advance, first = pay_installment(advance, installments[0], 334, date(2026, 2, 1))
        with pytest.raises(InvalidOperation):
            pay_installment(advance, first, 1, date(2026, 2, 2))


class TestDerivedStatus:
    def test_completed_once_every_installment_is_paid(self):
        advance, installments = approved_advance()
        paid = []
        for installment in installments:
            advance, installment = pay_installment(advance, installment, installment.amount, date(2026, 2, 1))
            paid.append(installment)

        two_paid, _ = recompute_derived_status(advance, paid[:2] + list(installments[2:]))
        assert two_paid.status == AdvanceStatus.APPROVED

        completed, overdue = recompute_derived_status(advance, paid)
        assert completed.status == AdvanceStatus.COMPLETED
        assert overdue is False
        assert completed.remaining_amount == 0

    def test_overdue_flag_does_not_change_status(self):
        advance, installments = approved_advance()
        flagged = mark_overdue(installments, date(2026, 3, 1))
        assert [i.status for i in flagged] == [
            InstallmentStatus.OVERDUE, InstallmentStatus.PENDING, InstallmentStatus.PENDING,
        ]
        same, overdue = recompute_derived_status(advance, flagged)
        assert same.status == AdvanceStatus.APPROVED
        assert overdue is True

    def test_due_today_is_not_overdue(self):
        _, installments = approved_advance()
        assert mark_overdue(installments, date(2026, 2, 10)) == list(installments)

    def test_pending_advance_is_left_alone(self):
        advance, installments = request_advance("e1", 1000, "Loan", 3, REQUESTED)
        assert recompute_derived_status(advance, installments) == (advance, False)
