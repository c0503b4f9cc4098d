from .payroll_builder import PayrollRecordBuilder, build_payroll_record
from .notification_emitter import NotificationEvent, emit
from .department_summary import PayrollSummary, department_payroll, summarize_payroll
from .payroll_register_generator import PayrollRegisterGenerator


__all__ = [
    'PayrollRecordBuilder',
    'build_payroll_record',
    'NotificationEvent',
    'emit',
    'PayrollSummary',
    'department_payroll',
    'summarize_payroll',
    'PayrollRegisterGenerator',
]
