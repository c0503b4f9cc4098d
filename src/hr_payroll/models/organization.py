from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Department:
    """Department data model"""
    id: str
    name: str
    code: str
    manager_id: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class PositionRecord:
    """Catalogue entry for a position and its salary band"""
    id: str
    title: str
    department_id: str
    level: int = 1
    min_salary: Decimal = Decimal('0')
    max_salary: Decimal = Decimal('0')
    description: Optional[str] = None
