import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from hr_payroll.database import SnapshotRepository, create_session_factory, init_db
from hr_payroll.models import AdvanceStatus, Employee, PayrollStatus, Position
from hr_payroll.processors import PayrollRegisterGenerator, department_payroll, summarize_payroll
from hr_payroll.store import StateStore, intents
from hr_payroll.utils.clock import FixedClock
from hr_payroll.utils.formatters import format_currency


def print_section(title):
    """Print a formatted section header"""
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80)


def print_success(message):
    """Print success message"""
    print(f"  ✓ {message}")


def print_info(message):
    """Print info message"""
    print(f"  → {message}")


STAFF = [
    Employee(id="e1", code="EMP-001", name="Mona Hassan", basic_salary=Decimal('16000'),
             position=Position("Accountant", "fin", "ACC"), monthly_incentives=Decimal('5')),
    Employee(id="e2", code="EMP-002", name="Omar Said", basic_salary=Decimal('9500'),
             position=Position("Storekeeper", "ops", "STK"), overtime_hours=Decimal('6')),
    Employee(id="e3", code="EMP-003", name="Laila Nabil", basic_salary=Decimal('24000'),
             position=Position("Finance Manager", "fin", "FM"), bonus=Decimal('1000')),
]


def test_complete_system():
    """Run a full payroll year against a SQLite-backed store"""
    year = 2026
    clock = FixedClock(datetime(year, 1, 5, 9, 0))
    engine, session_factory = create_session_factory("sqlite://")

    with tempfile.TemporaryDirectory() as output_dir:
        # ====================================================================
        # STEP 1: Initialize Database
        # ====================================================================
        print_section("STEP 1: Database Initialization")
        init_db(bind=engine)
        db = session_factory()
        store = StateStore(persistence=SnapshotRepository(db), clock=clock)
        store.load()
        print_success("Database initialized successfully")

        # ====================================================================
        # STEP 2: Employees
        # ====================================================================
        print_section("STEP 2: Employee Setup")
        store.dispatch(intents.SetEmployees(tuple(STAFF)))
        for employee in store.state.employees:
            print_info(f"Employee: {employee.name} ({employee.id})")
        assert len(store.state.employees) == 3

        finance = department_payroll(store.state.employees, store.state.settings, 1, year, "fin")
        assert finance.employee_count == 2
        print_success(f"Finance projected net: {format_currency(finance.total_net_salary)}")

        # ====================================================================
        # STEP 3: Advance for Omar, repaid over three months
        # ====================================================================
        print_section("STEP 3: Salary Advance")
        store.dispatch(intents.RequestAdvance("e2", Decimal('3000'), "Family event", 3, advance_id="adv-1"))
        store.dispatch(intents.ApproveAdvance("adv-1", "manager"))
        print_success("Advance of 3,000 approved in 3 installments")

        # ====================================================================
        # STEP 4: Generate, process and pay twelve months
        # ====================================================================
        print_section(f"STEP 4: Payroll for {year}")
        for month in range(1, 13):
            clock.set(datetime(year, month, 25, 10, 0))
            store.tick()

            installments = [i for i in store.state.installments_of("adv-1") if i.outstanding > 0]
            if installments:
                store.dispatch(intents.PayInstallment(installments[0].id, installments[0].outstanding))

            store.dispatch(intents.GeneratePayroll(month, year))
            for record in store.state.payroll_records:
                if record.month == month:
                    store.dispatch(intents.ProcessPayroll(record.id, "hr-1"))
                    store.dispatch(intents.MarkPayrollPaid(record.id, "finance-1"))

            monthly = summarize_payroll(r for r in store.state.payroll_records if r.month == month)
            print_success(f"Month {month:02d}: {monthly.employee_count} records, "
                          f"net {format_currency(monthly.total_net_salary)}")

        assert len(store.state.payroll_records) == 36
        assert all(r.status == PayrollStatus.PAID for r in store.state.payroll_records)
        assert store.state.advances[0].status == AdvanceStatus.COMPLETED
        assert store.last_persistence_error is None

        # ====================================================================
        # STEP 5: Payroll register
        # ====================================================================
        print_section("STEP 5: Payroll Register")
        generator = PayrollRegisterGenerator(Path(output_dir))
        filepath = generator.generate(list(store.state.payroll_records), year, 8)
        assert Path(filepath).exists()
        print_success(f"Register → {Path(filepath).name}")

        # ====================================================================
        # STEP 6: Restart from the database
        # ====================================================================
        print_section("STEP 6: Restart")
        restarted = StateStore(persistence=SnapshotRepository(session_factory()), clock=clock)
        restarted.load()
        assert restarted.state.payroll_records == store.state.payroll_records
        assert restarted.state.advances == store.state.advances
        print_success("State restored from the database")

        db.close()

    engine.dispose()

    print_section("TEST SUMMARY")
    yearly = summarize_payroll(store.state.payroll_records)
    print(f"\n  Records: {yearly.employee_count}")
    print(f"  Total net salary: {format_currency(yearly.total_net_salary)}")


if __name__ == "__main__":
    test_complete_system()
