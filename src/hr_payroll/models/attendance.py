from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EARLY_LEAVE = "early_leave"


@dataclass(frozen=True)
class AttendanceRecord:
    """Daily attendance entry"""
    id: str
    employee_id: str
    attendance_date: date
    check_in: str
    check_out: Optional[str] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    overtime_hours: Decimal = Decimal('0')
    notes: Optional[str] = None
