import openpyxl
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter
from pathlib import Path
from typing import List, Optional
from decimal import Decimal
from ..models.payroll import PayrollRecord, PayrollStatus
from ..config.settings import OUTPUT_DIR
from ..utils.formatters import format_period, round_money

# (header, record attribute, is money)
COLUMNS = [
    ('Employee code', 'employee_code', False),
    ('Employee name', 'employee_name', False),
    ('Position', 'position', False),
    ('Daily rate', 'daily_rate', True),
    ('Overtime rate', 'overtime_rate', True),
    ('Overtime hours', 'overtime_hours', False),
    ('Basic salary', 'basic_salary', True),
    ('Incentives', 'incentives', True),
    ('Bonus', 'bonus', True),
    ('Overtime amount', 'overtime_amount', True),
    ('Total salary', 'total_salary', True),
    ('Purchases', 'purchases', True),
    ('Advances', 'advances', True),
    ('Absent days', 'absent_days', False),
    ('Absence deductions', 'absence_deductions', True),
    ('Hourly deductions', 'hourly_deductions', True),
    ('Penalty days', 'penalty_days', False),
    ('Penalties', 'penalties', True),
    ('Social insurance', 'social_insurance', True),
    ('Health insurance', 'health_insurance', True),
    ('Income tax', 'income_tax', True),
    ('Net salary', 'net_salary', True),
    ('Monthly incentives', 'monthly_incentives', False),
    ('Daily rate with incentives', 'daily_rate_with_incentives', True),
    ('Status', 'status', False),
]

TOTAL_COLUMNS = {
    'basic_salary', 'incentives', 'bonus', 'overtime_amount', 'total_salary', 'purchases',
    'advances', 'absence_deductions', 'hourly_deductions', 'penalties', 'social_insurance',
    'health_insurance', 'income_tax', 'net_salary',
}

HEADER_ROW = 3


class PayrollRegisterGenerator:
    """Generate the monthly payroll register workbook"""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir) if output_dir else OUTPUT_DIR / "payroll"
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate(self, payroll_records: List[PayrollRecord], year: int, month: int) -> str:
        """Write one row per record for the period plus a totals row; returns the file path"""
        records = sorted(
            (r for r in payroll_records if r.year == year and r.month == month),
            key=lambda r: (r.employee_code, r.employee_name),
        )

        # Create workbook
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = f"Payroll {format_period(month, year)}"

        # Define styles
        title_font = Font(bold=True, size=14)
        bold_font = Font(bold=True)
        red_bold_font = Font(color="FF0000", bold=True)
        header_fill = PatternFill(start_color="B4C7E7", end_color="B4C7E7", fill_type="solid")
        total_fill = PatternFill(start_color="FFFF99", end_color="FFFF99", fill_type="solid")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        # Title
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(COLUMNS))
        ws['A1'] = f"PAYROLL REGISTER - {format_period(month, year)}"
        ws['A1'].font = title_font
        ws['A1'].alignment = Alignment(horizontal='center')

        # Headers
        for col_idx, (header, _, _) in enumerate(COLUMNS, start=1):
            cell = ws.cell(row=HEADER_ROW, column=col_idx)
            cell.value = header
            cell.font = bold_font
            cell.fill = header_fill
            cell.border = thin_border
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            ws.column_dimensions[get_column_letter(col_idx)].width = 16

        # Data rows
        row = HEADER_ROW + 1
        totals = {name: Decimal('0') for name in TOTAL_COLUMNS}

        for record in records:
            for col_idx, (_, attribute, is_money) in enumerate(COLUMNS, start=1):
                value = getattr(record, attribute)
                cell = ws.cell(row=row, column=col_idx)
                if attribute == 'status':
                    cell.value = PayrollStatus(value).value
                elif isinstance(value, Decimal):
                    cell.value = float(round_money(value)) if is_money else float(value)
                    cell.number_format = '#,##0.00'
                else:
                    cell.value = value
                cell.border = thin_border

                if attribute in totals:
                    totals[attribute] += value

            # Negative net salary stands out
            if record.net_salary < 0:
                ws.cell(row=row, column=self._column_of('net_salary')).font = red_bold_font
            row += 1

        # TOTAL row
        ws.cell(row=row, column=1, value="TOTAL").font = bold_font
        for col_idx, (_, attribute, _) in enumerate(COLUMNS, start=1):
            cell = ws.cell(row=row, column=col_idx)
            if attribute in totals:
                cell.value = float(round_money(totals[attribute]))
                cell.number_format = '#,##0.00'
            cell.font = bold_font
            cell.fill = total_fill
            cell.border = thin_border

        # Generate filename
        filename = f"payroll_register_{year}_{month:02d}.xlsx"
        filepath = self.output_dir / filename

        # Save workbook
        wb.save(filepath)

        return str(filepath)

    @staticmethod
    def _column_of(attribute: str) -> int:
        return next(idx for idx, (_, name, _) in enumerate(COLUMNS, start=1) if name == attribute)
