"""
Shared fixtures for the HR payroll tests.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from hr_payroll.database import create_session_factory, init_db
from hr_payroll.models import Employee, PayrollSettings, Position
from hr_payroll.store import InMemoryPersistence, StateStore
from hr_payroll.utils.clock import FixedClock

NOW = datetime(2026, 1, 15, 9, 0)


def make_employee(employee_id: str = "e1", **overrides) -> Employee:
    """Employee with round numbers: 16,000 basic salary and no period inputs"""
    values = dict(
        id=employee_id,
        code=f"EMP-{employee_id}",
        name=f"Employee {employee_id}",
        basic_salary=Decimal('16000'),
        position=Position(title="Accountant", department_id="fin", code="ACC"),
    )
    values.update(overrides)
    return Employee(**values)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def settings():
    """Default settings on a 20 day, 8 hour calendar (daily rate 800, hourly 100 at 16,000)"""
    return replace(PayrollSettings(), working_days_per_month=Decimal('20'))


@pytest.fixture
def employee():
    return make_employee()


@pytest.fixture
def persistence():
    return InMemoryPersistence()


@pytest.fixture
def store(persistence, clock):
    return StateStore(persistence=persistence, clock=clock)


@pytest.fixture
def db_session():
    """Session bound to a private in-memory SQLite database"""
    engine, factory = create_session_factory("sqlite://")
    init_db(bind=engine)
    session = factory()
    yield session
    session.close()
    engine.dispose()
