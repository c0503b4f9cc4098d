"""
Advance (salary loan) lifecycle and installment amortization.

An advance of ``amount`` split into ``n`` installments is scheduled as
``n - 1`` equal installments of ``ceil(amount / n)`` followed by a last
installment holding the remainder, so the installments always sum to the
advance amount exactly. A count that would leave the last installment at zero
or below is rejected.
"""

import calendar
import uuid
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal, ROUND_CEILING
from typing import Iterable, List, Optional, Sequence, Tuple

from ..errors import InvalidInput, InvalidOperation, InvalidTransition
from ..models.advance import Advance, AdvanceInstallment, AdvanceStatus, InstallmentStatus
from ..utils.validators import require_positive

# Decisions a reviewer can take on an advance, each only from pending
ADVANCE_DECISIONS = {
    AdvanceStatus.PENDING: (AdvanceStatus.APPROVED, AdvanceStatus.REJECTED),
}


def add_months(start: date, months: int) -> date:
    """Same day ``months`` later, clamped to the last day of a shorter month"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def split_amount(amount: Decimal, count: int) -> List[Decimal]:
    """Equal ceil-rounded installments with the remainder in the last one"""
    per_installment = (amount / count).to_integral_value(rounding=ROUND_CEILING)
    amounts = [per_installment] * (count - 1)
    amounts.append(amount - per_installment * (count - 1))
    return amounts


def request_advance(employee_id: str, amount, reason: str, installments_count: int,
                    request_date: datetime, advance_id: Optional[str] = None,
                    notes: Optional[str] = None) -> Tuple[Advance, List[AdvanceInstallment]]:
    """Create a pending advance together with its installment schedule"""
    principal = require_positive(amount, "amount")
    if (not isinstance(installments_count, int) or isinstance(installments_count, bool)
            or installments_count < 1):
        raise InvalidInput(f"installments_count must be at least 1, got {installments_count!r}")
    if not employee_id:
        raise InvalidInput("employee_id is required")

    advance_id = advance_id or uuid.uuid4().hex
    start = request_date.date() if isinstance(request_date, datetime) else request_date

    advance = Advance(
        id=advance_id,
        employee_id=employee_id,
        amount=principal,
        request_date=request_date,
        reason=reason,
        installments_count=installments_count,
        remaining_amount=principal,
        status=AdvanceStatus.PENDING,
        notes=notes,
    )

    amounts = split_amount(principal, installments_count)
    if amounts[-1] <= 0:
        raise InvalidInput(
            f"installments_count {installments_count} is too large for an advance of {principal}"
        )

    installments = []
    for index, installment_amount in enumerate(amounts, start=1):
        installments.append(AdvanceInstallment(
            id=f"{advance_id}-{index}",
            advance_id=advance_id,
            number=index,
            amount=installment_amount,
            due_date=add_months(start, index),
            paid_amount=Decimal('0'),
            status=InstallmentStatus.PENDING,
        ))

    check_installment_sum(advance, installments)
    return advance, installments


def _decide(advance: Advance, target: AdvanceStatus, actor_id: str, now: datetime) -> Advance:
    current = AdvanceStatus(advance.status)
    if target not in ADVANCE_DECISIONS.get(current, ()):
        raise InvalidTransition(
            f"Advance {advance.id} cannot move from {current.value} to {target.value}"
        )
    return replace(advance, status=target, approved_by=actor_id, approval_date=now)


def approve(advance: Advance, actor_id: str, now: datetime) -> Advance:
    return _decide(advance, AdvanceStatus.APPROVED, actor_id, now)


def reject(advance: Advance, actor_id: str, now: datetime) -> Advance:
    return _decide(advance, AdvanceStatus.REJECTED, actor_id, now)


def delete_advance(advance: Advance) -> None:
    """Approved, rejected and completed advances are immutable history"""
    if AdvanceStatus(advance.status) != AdvanceStatus.PENDING:
        raise InvalidOperation(
            f"Advance {advance.id} is {AdvanceStatus(advance.status).value} and cannot be deleted"
        )


def pay_installment(advance: Advance, installment: AdvanceInstallment, amount,
                    paid_date: date) -> Tuple[Advance, AdvanceInstallment]:
    """Record a (partial) payment against one installment of an approved advance"""
    payment = require_positive(amount, "amount")
    if installment.advance_id != advance.id:
        raise InvalidInput(f"Installment {installment.id} does not belong to advance {advance.id}")
    if AdvanceStatus(advance.status) != AdvanceStatus.APPROVED:
        raise InvalidOperation(
            f"Installments can only be paid on approved advances, advance {advance.id} "
            f"is {AdvanceStatus(advance.status).value}"
        )
    if InstallmentStatus(installment.status) == InstallmentStatus.PAID:
        raise InvalidOperation(f"Installment {installment.id} is already paid")
    if installment.paid_amount + payment > installment.amount:
        raise InvalidInput(
            f"Payment of {payment} exceeds the {installment.outstanding} outstanding on installment {installment.id}"
        )

    paid_amount = installment.paid_amount + payment
    status = InstallmentStatus.PAID if paid_amount >= installment.amount else installment.status
    updated_installment = replace(installment, paid_amount=paid_amount, paid_date=paid_date, status=status)
    updated_advance = replace(advance, remaining_amount=advance.remaining_amount - payment)
    return updated_advance, updated_installment


def is_overdue(installment: AdvanceInstallment, today: date) -> bool:
    return installment.due_date < today and installment.paid_amount < installment.amount


def mark_overdue(installments: Iterable[AdvanceInstallment], today: date) -> List[AdvanceInstallment]:
    """Flag pending installments whose due date has passed"""
    result = []
    for installment in installments:
        if InstallmentStatus(installment.status) == InstallmentStatus.PENDING and is_overdue(installment, today):
            installment = replace(installment, status=InstallmentStatus.OVERDUE)
        result.append(installment)
    return result


def recompute_derived_status(advance: Advance,
                             installments: Sequence[AdvanceInstallment]) -> Tuple[Advance, bool]:
    """
    Derive the advance status from its installments.

    Returns the (possibly completed) advance and whether an overdue
    notification is due. An overdue installment never changes the advance
    status.
    """
    if AdvanceStatus(advance.status) != AdvanceStatus.APPROVED:
        return advance, False

    statuses = [InstallmentStatus(i.status) for i in installments]
    if statuses and all(s == InstallmentStatus.PAID for s in statuses):
        return replace(advance, status=AdvanceStatus.COMPLETED), False

    return advance, InstallmentStatus.OVERDUE in statuses


def check_installment_sum(advance: Advance, installments: Sequence[AdvanceInstallment]) -> None:
    """Installments must add up to the advance amount, and the unpaid part to the remaining amount"""
    total = sum((i.amount for i in installments), Decimal('0'))
    if total != advance.amount:
        raise InvalidOperation(
            f"Installments of advance {advance.id} sum to {total}, expected {advance.amount}"
        )
    outstanding = sum((i.outstanding for i in installments), Decimal('0'))
    if outstanding != advance.remaining_amount:
        raise InvalidOperation(
            f"Advance {advance.id} remaining amount {advance.remaining_amount} "
            f"does not match {outstanding} outstanding"
        )
