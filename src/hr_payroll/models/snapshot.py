from dataclasses import dataclass, field
from typing import Tuple

from .advance import Advance, AdvanceInstallment
from .attendance import AttendanceRecord
from .employee import Employee
from .notification import Notification
from .organization import Department, PositionRecord
from .payroll import PayrollRecord, PayrollSettings


@dataclass(frozen=True)
class Snapshot:
    """Complete application state; every transition yields a new instance"""
    employees: Tuple[Employee, ...] = ()
    departments: Tuple[Department, ...] = ()
    positions: Tuple[PositionRecord, ...] = ()
    attendance_records: Tuple[AttendanceRecord, ...] = ()
    advances: Tuple[Advance, ...] = ()
    advance_installments: Tuple[AdvanceInstallment, ...] = ()
    payroll_records: Tuple[PayrollRecord, ...] = ()
    notifications: Tuple[Notification, ...] = ()  # newest first
    settings: PayrollSettings = field(default_factory=PayrollSettings)

    def installments_of(self, advance_id: str) -> Tuple[AdvanceInstallment, ...]:
        return tuple(i for i in self.advance_installments if i.advance_id == advance_id)
