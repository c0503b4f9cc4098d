from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class EmployeeStatus(str, Enum):
    """Employment status; inactive replaces deletion once payroll history exists"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"


@dataclass(frozen=True)
class Position:
    """Position held by an employee"""
    title: str = ""
    department_id: Optional[str] = None
    code: str = ""


@dataclass(frozen=True)
class Employee:
    """Employee data model with the current period's payroll inputs"""
    id: str
    code: str
    name: str
    basic_salary: Decimal
    position: Position = field(default_factory=Position)
    monthly_incentives: Decimal = Decimal('0')
    bonus: Decimal = Decimal('0')

    # Period inputs
    overtime_hours: Decimal = Decimal('0')
    absence_days: Decimal = Decimal('0')
    penalties: Decimal = Decimal('0')
    penalty_days: Decimal = Decimal('0')
    advances: Decimal = Decimal('0')
    purchases: Decimal = Decimal('0')
    hourly_deductions: Decimal = Decimal('0')

    status: EmployeeStatus = EmployeeStatus.ACTIVE
    join_date: Optional[date] = None
