from decimal import Decimal

import openpyxl

from hr_payroll.processors.payroll_builder import build_payroll_record
from hr_payroll.processors.payroll_register_generator import COLUMNS, HEADER_ROW, PayrollRegisterGenerator

from conftest import make_employee


def column(attribute):
    return next(i for i, (_, name, _) in enumerate(COLUMNS, start=1) if name == attribute)


def test_register_layout(tmp_path, settings):
    records = [
        build_payroll_record(make_employee("e2", code="B-2"), 1, 2026, settings),
        build_payroll_record(make_employee("e1", code="A-1", advances=Decimal('20000')), 1, 2026, settings),
        build_payroll_record(make_employee("e3", code="C-3"), 2, 2026, settings),
    ]

    filepath = PayrollRegisterGenerator(tmp_path).generate(records, 2026, 1)
    assert filepath.endswith("payroll_register_2026_01.xlsx")

    ws = openpyxl.load_workbook(filepath).active
    assert ws.cell(row=1, column=1).value == "PAYROLL REGISTER - 2026-01"
    assert [ws.cell(row=HEADER_ROW, column=i).value for i in range(1, 3)] == ["Employee code", "Employee name"]

    # Sorted by code, other periods left out
    assert ws.cell(row=HEADER_ROW + 1, column=1).value == "A-1"
    assert ws.cell(row=HEADER_ROW + 2, column=1).value == "B-2"
    assert ws.cell(row=HEADER_ROW + 3, column=1).value == "TOTAL"

    net_column = column('net_salary')
    negative = ws.cell(row=HEADER_ROW + 1, column=net_column)
    assert negative.value < 0
    assert negative.font.bold
    assert "FF0000" in negative.font.color.rgb

    expected_total = sum(r.net_salary for r in records[:2])
    assert ws.cell(row=HEADER_ROW + 3, column=net_column).value == float(expected_total.quantize(Decimal('0.01')))


def test_empty_period_still_has_totals(tmp_path):
    filepath = PayrollRegisterGenerator(tmp_path).generate([], 2026, 5)
    ws = openpyxl.load_workbook(filepath).active
    assert ws.cell(row=HEADER_ROW + 1, column=1).value == "TOTAL"
    assert ws.cell(row=HEADER_ROW + 1, column=column('net_salary')).value == 0
