from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class AdvanceStatus(str, Enum):
    """Advance lifecycle; completed is derived from the installments"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class Advance:
    """Salary advance (short-term loan) repaid through installments"""
    id: str
    employee_id: str
    amount: Decimal
    request_date: datetime
    reason: str
    installments_count: int
    remaining_amount: Decimal
    status: AdvanceStatus = AdvanceStatus.PENDING
    approved_by: Optional[str] = None
    approval_date: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AdvanceInstallment:
    """One scheduled repayment of an advance"""
    id: str
    advance_id: str
    number: int
    amount: Decimal
    due_date: date
    paid_amount: Decimal = Decimal('0')
    paid_date: Optional[date] = None
    status: InstallmentStatus = InstallmentStatus.PENDING

    @property
    def outstanding(self) -> Decimal:
        return self.amount - self.paid_amount
