from .advance import Advance, AdvanceInstallment, AdvanceStatus, InstallmentStatus
from .attendance import AttendanceRecord, AttendanceStatus
from .employee import Employee, EmployeeStatus, Position
from .notification import Notification, NotificationStatus, NotificationType
from .organization import Department, PositionRecord
from .payroll import (
    AbsenceMode,
    DailyRateMode,
    DEFAULT_TAX_BRACKETS,
    IncentiveMode,
    OvertimeMode,
    PayrollRecord,
    PayrollSettings,
    PayrollStatus,
    TaxBracket,
    payroll_record_id,
)
from .snapshot import Snapshot

__all__ = [
    'Advance',
    'AdvanceInstallment',
    'AdvanceStatus',
    'InstallmentStatus',
    'AttendanceRecord',
    'AttendanceStatus',
    'Employee',
    'EmployeeStatus',
    'Position',
    'Notification',
    'NotificationStatus',
    'NotificationType',
    'Department',
    'PositionRecord',
    'AbsenceMode',
    'DailyRateMode',
    'DEFAULT_TAX_BRACKETS',
    'IncentiveMode',
    'OvertimeMode',
    'PayrollRecord',
    'PayrollSettings',
    'PayrollStatus',
    'TaxBracket',
    'payroll_record_id',
    'Snapshot',
]
