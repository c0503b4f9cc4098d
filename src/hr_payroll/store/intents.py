"""
Transition intents understood by the reducer.

Each intent is a small immutable value describing what the caller wants; the
reducer maps every intent type to exactly one transition.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from ..models.advance import Advance, AdvanceInstallment
from ..models.attendance import AttendanceRecord
from ..models.employee import Employee
from ..models.notification import Notification
from ..models.organization import Department, PositionRecord


class Intent:
    """Base class of every state transition intent"""


# ========== Employees and organisation ==========

@dataclass(frozen=True)
class SetEmployees(Intent):
    employees: Tuple[Employee, ...]


@dataclass(frozen=True)
class AddEmployee(Intent):
    employee: Employee


@dataclass(frozen=True)
class UpdateEmployee(Intent):
    id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class DeleteEmployee(Intent):
    id: str


@dataclass(frozen=True)
class AddDepartment(Intent):
    department: Department


@dataclass(frozen=True)
class UpdateDepartment(Intent):
    id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class DeleteDepartment(Intent):
    id: str


@dataclass(frozen=True)
class AddPosition(Intent):
    position: PositionRecord


@dataclass(frozen=True)
class UpdatePosition(Intent):
    id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class AddAttendanceRecord(Intent):
    record: AttendanceRecord


@dataclass(frozen=True)
class UpdateAttendance(Intent):
    id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class UpdateSettings(Intent):
    changes: Mapping[str, Any]


# ========== Payroll ==========

@dataclass(frozen=True)
class GeneratePayroll(Intent):
    """Generate one record per listed employee, or per active employee when none are listed"""
    month: int
    year: int
    employee_ids: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class ProcessPayroll(Intent):
    record_id: str
    actor_id: str


@dataclass(frozen=True)
class MarkPayrollPaid(Intent):
    record_id: str
    actor_id: str


# ========== Advances ==========

@dataclass(frozen=True)
class RequestAdvance(Intent):
    employee_id: str
    amount: Decimal
    reason: str
    installments_count: int
    notes: Optional[str] = None
    advance_id: Optional[str] = None


@dataclass(frozen=True)
class AddAdvance(Intent):
    """Insert an already scheduled advance with its installments"""
    advance: Advance
    installments: Tuple[AdvanceInstallment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ApproveAdvance(Intent):
    advance_id: str
    actor_id: str


@dataclass(frozen=True)
class RejectAdvance(Intent):
    advance_id: str
    actor_id: str


@dataclass(frozen=True)
class DeleteAdvance(Intent):
    advance_id: str


@dataclass(frozen=True)
class PayInstallment(Intent):
    installment_id: str
    amount: Decimal


@dataclass(frozen=True)
class MarkOverdueInstallments(Intent):
    """Flag every unpaid installment of an approved advance whose due date has passed"""


# ========== Notifications ==========

@dataclass(frozen=True)
class AddNotification(Intent):
    notification: Notification


@dataclass(frozen=True)
class MarkNotificationRead(Intent):
    id: str


@dataclass(frozen=True)
class MarkAllNotificationsRead(Intent):
    pass


@dataclass(frozen=True)
class ClearNotifications(Intent):
    pass


@dataclass(frozen=True)
class PruneNotifications(Intent):
    pass
