"""
Pure state transitions.

``apply(snapshot, intent, now)`` returns a new snapshot and never mutates the
one it was given, so a failed transition leaves the caller's snapshot exactly
as it was. After every transition the advances touched by it have their
derived status recomputed and expired notifications are pruned.
"""

from dataclasses import fields, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Type

from ..config.settings import NOTIFICATION_RETENTION_DAYS
from ..errors import InvalidInput, InvalidOperation, NotFound
from ..models.advance import Advance, AdvanceStatus
from ..models.attendance import AttendanceRecord, AttendanceStatus
from ..models.employee import Employee, EmployeeStatus, Position
from ..models.notification import Notification, NotificationStatus
from ..models.organization import Department, PositionRecord
from ..models.payroll import PayrollSettings, payroll_record_id
from ..models.snapshot import Snapshot
from ..processors import advance_engine
from ..processors.notification_emitter import NotificationEvent, emit
from ..processors.payroll_builder import PayrollRecordBuilder, mark_paid, process
from ..processors.settings_validation import validate_settings
from ..utils.formatters import format_period
from ..utils.validators import require_non_negative, require_positive
from . import intents as i

Handler = Callable[[Snapshot, Any, datetime], Snapshot]

_HANDLERS: Dict[Type[i.Intent], Handler] = {}

EMPLOYEE_AMOUNT_FIELDS = (
    'monthly_incentives', 'bonus', 'overtime_hours', 'absence_days', 'penalties',
    'penalty_days', 'advances', 'purchases', 'hourly_deductions',
)


def handles(intent_type: Type[i.Intent]):
    """Register the transition for one intent type"""
    def register(func: Handler) -> Handler:
        _HANDLERS[intent_type] = func
        return func
    return register


def apply(snapshot: Snapshot, intent: i.Intent, now: datetime) -> Snapshot:
    """Apply one intent and return the next snapshot"""
    handler = _HANDLERS.get(type(intent))
    if handler is None:
        raise InvalidInput(f"Unknown intent {type(intent).__name__}")

    next_snapshot = handler(snapshot, intent, now)
    next_snapshot = recompute_touched_advances(snapshot, next_snapshot, now)
    return replace(next_snapshot, notifications=prune_notifications(next_snapshot.notifications, now))


def prune_notifications(notifications: Iterable[Notification], now: datetime,
                        retention_days: int = NOTIFICATION_RETENTION_DAYS) -> Tuple[Notification, ...]:
    """Drop notifications created more than ``retention_days`` before ``now``"""
    retention = timedelta(days=retention_days)
    return tuple(n for n in notifications if now - n.created_at <= retention)


def recompute_touched_advances(before: Snapshot, after: Snapshot, now: datetime) -> Snapshot:
    """Derive advance status for every advance whose record or installments changed"""
    unchanged_installments = set(before.advance_installments)
    unchanged_advances = set(before.advances)
    touched = {inst.advance_id for inst in after.advance_installments if inst not in unchanged_installments}
    touched.update(a.id for a in after.advances if a not in unchanged_advances)
    if not touched:
        return after

    advances = []
    snapshot = after
    for advance in after.advances:
        if advance.id in touched:
            advance, overdue = advance_engine.recompute_derived_status(advance, after.installments_of(advance.id))
            if overdue:
                snapshot = _notify(snapshot, emit(
                    NotificationEvent.INSTALLMENT_OVERDUE, now, target_id=advance.id,
                    employee_name=_employee_name(after, advance.employee_id),
                ))
        advances.append(advance)
    return replace(snapshot, advances=tuple(advances))


# ========== Helpers ==========

def _notify(snapshot: Snapshot, notification: Notification) -> Snapshot:
    return replace(snapshot, notifications=(notification,) + snapshot.notifications)


def _employee_name(snapshot: Snapshot, employee_id: str) -> str:
    employee = next((e for e in snapshot.employees if e.id == employee_id), None)
    return employee.name if employee else employee_id


def _find(items: Iterable[Any], entity_id: str, label: str) -> Any:
    found = next((item for item in items if item.id == entity_id), None)
    if found is None:
        raise NotFound(f"{label} {entity_id} not found")
    return found


def _check_fields(entity_type: type, changes: Mapping[str, Any]) -> None:
    allowed = {f.name for f in fields(entity_type)}
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise InvalidInput(f"Unknown {entity_type.__name__} field(s): {', '.join(unknown)}")


def _update_by_id(items: Tuple[Any, ...], entity_type: type, entity_id: str, changes: Mapping[str, Any],
                  normalize: Optional[Callable[[Any], Any]] = None) -> Tuple[Any, ...]:
    """Shallow-merge ``changes`` onto the entity with ``entity_id``; unknown ids change nothing"""
    _check_fields(entity_type, changes)
    if 'id' in changes and changes['id'] != entity_id:
        raise InvalidInput(f"{entity_type.__name__} id cannot be changed")

    result = []
    for item in items:
        if item.id == entity_id:
            item = replace(item, **changes)
            if normalize:
                item = normalize(item)
        result.append(item)
    return tuple(result)


def _ensure_new_id(items: Iterable[Any], entity_id: str, label: str) -> None:
    if not entity_id:
        raise InvalidInput(f"{label} id is required")
    if any(item.id == entity_id for item in items):
        raise InvalidOperation(f"{label} {entity_id} already exists")


def normalize_employee(employee: Employee, today=None) -> Employee:
    """Validate an employee and coerce its amounts to Decimal"""
    changes = {'basic_salary': require_positive(employee.basic_salary, "basic_salary")}
    for name in EMPLOYEE_AMOUNT_FIELDS:
        changes[name] = require_non_negative(getattr(employee, name), name)
    try:
        changes['status'] = EmployeeStatus(employee.status)
    except ValueError:
        raise InvalidInput(f"Unknown employee status {employee.status!r}")
    if not isinstance(employee.position, Position):
        raise InvalidInput("position must be a Position")
    if today is not None and employee.join_date is not None and employee.join_date > today:
        raise InvalidInput(f"join_date {employee.join_date} is in the future")
    return replace(employee, **changes)


def _normalize_attendance(record: AttendanceRecord) -> AttendanceRecord:
    try:
        status = AttendanceStatus(record.status)
    except ValueError:
        raise InvalidInput(f"Unknown attendance status {record.status!r}")
    return replace(record, status=status,
                   overtime_hours=require_non_negative(record.overtime_hours, "overtime_hours"))


# ========== Employees and organisation ==========

@handles(i.SetEmployees)
def _set_employees(snapshot: Snapshot, intent: i.SetEmployees, now: datetime) -> Snapshot:
    employees = tuple(normalize_employee(e, now.date()) for e in intent.employees)
    ids = [e.id for e in employees]
    if len(set(ids)) != len(ids):
        raise InvalidInput("Employee ids must be unique")
    return replace(snapshot, employees=employees)


@handles(i.AddEmployee)
def _add_employee(snapshot: Snapshot, intent: i.AddEmployee, now: datetime) -> Snapshot:
    _ensure_new_id(snapshot.employees, intent.employee.id, "Employee")
    employee = normalize_employee(intent.employee, now.date())
    snapshot = replace(snapshot, employees=snapshot.employees + (employee,))
    return _notify(snapshot, emit(NotificationEvent.EMPLOYEE_ADDED, now, target_id=employee.id,
                                  employee_name=employee.name))


@handles(i.UpdateEmployee)
def _update_employee(snapshot: Snapshot, intent: i.UpdateEmployee, now: datetime) -> Snapshot:
    employees = _update_by_id(snapshot.employees, Employee, intent.id, intent.changes,
                              lambda e: normalize_employee(e, now.date()))
    if not any(e.id == intent.id for e in employees):
        return snapshot
    snapshot = replace(snapshot, employees=employees)
    return _notify(snapshot, emit(NotificationEvent.EMPLOYEE_UPDATED, now, target_id=intent.id,
                                  employee_name=_employee_name(snapshot, intent.id)))


@handles(i.DeleteEmployee)
def _delete_employee(snapshot: Snapshot, intent: i.DeleteEmployee, now: datetime) -> Snapshot:
    if any(r.employee_id == intent.id for r in snapshot.payroll_records):
        raise InvalidOperation(
            f"Employee {intent.id} has payroll history; set the status to inactive instead"
        )
    if any(a.employee_id == intent.id for a in snapshot.advances):
        raise InvalidOperation(f"Employee {intent.id} has advances and cannot be deleted")
    return replace(snapshot, employees=tuple(e for e in snapshot.employees if e.id != intent.id))


@handles(i.AddDepartment)
def _add_department(snapshot: Snapshot, intent: i.AddDepartment, now: datetime) -> Snapshot:
    _ensure_new_id(snapshot.departments, intent.department.id, "Department")
    department = replace(intent.department,
                         created_at=intent.department.created_at or now,
                         updated_at=intent.department.updated_at or now)
    return replace(snapshot, departments=snapshot.departments + (department,))


@handles(i.UpdateDepartment)
def _update_department(snapshot: Snapshot, intent: i.UpdateDepartment, now: datetime) -> Snapshot:
    changes = dict(intent.changes)
    changes.setdefault('updated_at', now)
    return replace(snapshot, departments=_update_by_id(snapshot.departments, Department, intent.id, changes))


@handles(i.DeleteDepartment)
def _delete_department(snapshot: Snapshot, intent: i.DeleteDepartment, now: datetime) -> Snapshot:
    return replace(snapshot, departments=tuple(d for d in snapshot.departments if d.id != intent.id))


@handles(i.AddPosition)
def _add_position(snapshot: Snapshot, intent: i.AddPosition, now: datetime) -> Snapshot:
    _ensure_new_id(snapshot.positions, intent.position.id, "Position")
    return replace(snapshot, positions=snapshot.positions + (intent.position,))


@handles(i.UpdatePosition)
def _update_position(snapshot: Snapshot, intent: i.UpdatePosition, now: datetime) -> Snapshot:
    return replace(snapshot, positions=_update_by_id(snapshot.positions, PositionRecord, intent.id, intent.changes))


@handles(i.AddAttendanceRecord)
def _add_attendance(snapshot: Snapshot, intent: i.AddAttendanceRecord, now: datetime) -> Snapshot:
    _ensure_new_id(snapshot.attendance_records, intent.record.id, "Attendance record")
    _find(snapshot.employees, intent.record.employee_id, "Employee")
    record = _normalize_attendance(intent.record)
    return replace(snapshot, attendance_records=snapshot.attendance_records + (record,))


@handles(i.UpdateAttendance)
def _update_attendance(snapshot: Snapshot, intent: i.UpdateAttendance, now: datetime) -> Snapshot:
    records = _update_by_id(snapshot.attendance_records, AttendanceRecord, intent.id, intent.changes,
                            _normalize_attendance)
    return replace(snapshot, attendance_records=records)


@handles(i.UpdateSettings)
def _update_settings(snapshot: Snapshot, intent: i.UpdateSettings, now: datetime) -> Snapshot:
    _check_fields(PayrollSettings, intent.changes)
    settings = validate_settings(replace(snapshot.settings, **intent.changes))
    return replace(snapshot, settings=settings)


# ========== Payroll ==========

@handles(i.GeneratePayroll)
def _generate_payroll(snapshot: Snapshot, intent: i.GeneratePayroll, now: datetime) -> Snapshot:
    if intent.employee_ids is None:
        employees = [e for e in snapshot.employees if EmployeeStatus(e.status) == EmployeeStatus.ACTIVE]
    else:
        if len(set(intent.employee_ids)) != len(intent.employee_ids):
            raise InvalidInput("Employee ids must not repeat")
        employees = [_find(snapshot.employees, employee_id, "Employee") for employee_id in intent.employee_ids]

    existing = {r.id for r in snapshot.payroll_records}
    for employee in employees:
        record_id = payroll_record_id(employee.id, intent.month, intent.year)
        if record_id in existing:
            raise InvalidOperation(
                f"Payroll for {employee.name} for {format_period(intent.month, intent.year)} was already generated"
            )

    builder = PayrollRecordBuilder(snapshot.settings)
    records = [builder.build(e, intent.month, intent.year, created_at=now) for e in employees]

    snapshot = replace(snapshot, payroll_records=snapshot.payroll_records + tuple(records))
    for record in records:
        snapshot = _notify(snapshot, emit(
            NotificationEvent.PAYROLL_GENERATED, now, target_id=record.id,
            employee_name=record.employee_name, period=format_period(record.month, record.year),
            amount=record.net_salary,
        ))
    return snapshot


def _transition_payroll(snapshot: Snapshot, record_id: str, transition, actor_id: str,
                        event: NotificationEvent, now: datetime) -> Snapshot:
    record = _find(snapshot.payroll_records, record_id, "Payroll record")
    updated = transition(record, actor_id, now)
    snapshot = replace(snapshot, payroll_records=tuple(
        updated if r.id == record_id else r for r in snapshot.payroll_records
    ))
    return _notify(snapshot, emit(
        event, now, target_id=record_id, employee_name=updated.employee_name,
        period=format_period(updated.month, updated.year), amount=updated.net_salary,
    ))


@handles(i.ProcessPayroll)
def _process_payroll(snapshot: Snapshot, intent: i.ProcessPayroll, now: datetime) -> Snapshot:
    return _transition_payroll(snapshot, intent.record_id, process, intent.actor_id,
                               NotificationEvent.PAYROLL_PROCESSED, now)


@handles(i.MarkPayrollPaid)
def _mark_payroll_paid(snapshot: Snapshot, intent: i.MarkPayrollPaid, now: datetime) -> Snapshot:
    return _transition_payroll(snapshot, intent.record_id, mark_paid, intent.actor_id,
                               NotificationEvent.PAYROLL_PAID, now)


# ========== Advances ==========

def _insert_advance(snapshot: Snapshot, advance: Advance, installments) -> Snapshot:
    _ensure_new_id(snapshot.advances, advance.id, "Advance")
    installments = tuple(installments)
    if any(inst.advance_id != advance.id for inst in installments):
        raise InvalidInput(f"Every installment must reference advance {advance.id}")
    if any(inst.amount <= 0 for inst in installments):
        raise InvalidInput(f"Every installment of advance {advance.id} must be greater than zero")
    _ensure_unique_installments(snapshot, installments)
    advance_engine.check_installment_sum(advance, installments)
    return replace(
        snapshot,
        advances=snapshot.advances + (advance,),
        advance_installments=snapshot.advance_installments + installments,
    )


def _ensure_unique_installments(snapshot: Snapshot, installments) -> None:
    existing = {inst.id for inst in snapshot.advance_installments}
    for inst in installments:
        if inst.id in existing:
            raise InvalidOperation(f"Installment {inst.id} already exists")
        existing.add(inst.id)


@handles(i.RequestAdvance)
def _request_advance(snapshot: Snapshot, intent: i.RequestAdvance, now: datetime) -> Snapshot:
    employee = _find(snapshot.employees, intent.employee_id, "Employee")
    advance, installments = advance_engine.request_advance(
        employee.id, intent.amount, intent.reason, intent.installments_count,
        request_date=now, advance_id=intent.advance_id, notes=intent.notes,
    )
    snapshot = _insert_advance(snapshot, advance, installments)
    return _notify(snapshot, emit(NotificationEvent.ADVANCE_REQUESTED, now, target_id=advance.id,
                                  employee_name=employee.name, amount=advance.amount))


@handles(i.AddAdvance)
def _add_advance(snapshot: Snapshot, intent: i.AddAdvance, now: datetime) -> Snapshot:
    return _insert_advance(snapshot, intent.advance, intent.installments)


def _decide_advance(snapshot: Snapshot, advance_id: str, decide, actor_id: str,
                    event: NotificationEvent, now: datetime) -> Snapshot:
    advance = _find(snapshot.advances, advance_id, "Advance")
    updated = decide(advance, actor_id, now)
    snapshot = replace(snapshot, advances=tuple(updated if a.id == advance_id else a for a in snapshot.advances))
    return _notify(snapshot, emit(event, now, target_id=advance_id,
                                  employee_name=_employee_name(snapshot, advance.employee_id),
                                  amount=advance.amount))


@handles(i.ApproveAdvance)
def _approve_advance(snapshot: Snapshot, intent: i.ApproveAdvance, now: datetime) -> Snapshot:
    return _decide_advance(snapshot, intent.advance_id, advance_engine.approve, intent.actor_id,
                           NotificationEvent.ADVANCE_APPROVED, now)


@handles(i.RejectAdvance)
def _reject_advance(snapshot: Snapshot, intent: i.RejectAdvance, now: datetime) -> Snapshot:
    return _decide_advance(snapshot, intent.advance_id, advance_engine.reject, intent.actor_id,
                           NotificationEvent.ADVANCE_REJECTED, now)


@handles(i.DeleteAdvance)
def _delete_advance(snapshot: Snapshot, intent: i.DeleteAdvance, now: datetime) -> Snapshot:
    advance = _find(snapshot.advances, intent.advance_id, "Advance")
    advance_engine.delete_advance(advance)
    return replace(
        snapshot,
        advances=tuple(a for a in snapshot.advances if a.id != advance.id),
        advance_installments=tuple(inst for inst in snapshot.advance_installments
                                   if inst.advance_id != advance.id),
    )


@handles(i.PayInstallment)
def _pay_installment(snapshot: Snapshot, intent: i.PayInstallment, now: datetime) -> Snapshot:
    installment = _find(snapshot.advance_installments, intent.installment_id, "Installment")
    advance = _find(snapshot.advances, installment.advance_id, "Advance")
    advance, installment = advance_engine.pay_installment(advance, installment, intent.amount, now.date())

    snapshot = replace(
        snapshot,
        advances=tuple(advance if a.id == advance.id else a for a in snapshot.advances),
        advance_installments=tuple(installment if inst.id == installment.id else inst
                                   for inst in snapshot.advance_installments),
    )
    advance_engine.check_installment_sum(advance, snapshot.installments_of(advance.id))
    return _notify(snapshot, emit(
        NotificationEvent.INSTALLMENT_PAID, now, target_id=advance.id,
        employee_name=_employee_name(snapshot, advance.employee_id),
        amount=require_positive(intent.amount, "amount"), number=installment.number,
    ))


@handles(i.MarkOverdueInstallments)
def _mark_overdue(snapshot: Snapshot, intent: i.MarkOverdueInstallments, now: datetime) -> Snapshot:
    approved = {a.id for a in snapshot.advances if AdvanceStatus(a.status) == AdvanceStatus.APPROVED}
    today = now.date()
    installments = []
    for inst in snapshot.advance_installments:
        if inst.advance_id in approved:
            inst = advance_engine.mark_overdue([inst], today)[0]
        installments.append(inst)
    return replace(snapshot, advance_installments=tuple(installments))


# ========== Notifications ==========

@handles(i.AddNotification)
def _add_notification(snapshot: Snapshot, intent: i.AddNotification, now: datetime) -> Snapshot:
    return _notify(snapshot, intent.notification)


@handles(i.MarkNotificationRead)
def _mark_notification_read(snapshot: Snapshot, intent: i.MarkNotificationRead, now: datetime) -> Snapshot:
    return replace(snapshot, notifications=tuple(
        replace(n, status=NotificationStatus.READ) if n.id == intent.id else n
        for n in snapshot.notifications
    ))


@handles(i.MarkAllNotificationsRead)
def _mark_all_notifications_read(snapshot: Snapshot, intent: i.MarkAllNotificationsRead,
                                 now: datetime) -> Snapshot:
    return replace(snapshot, notifications=tuple(
        replace(n, status=NotificationStatus.READ) for n in snapshot.notifications
    ))


@handles(i.ClearNotifications)
def _clear_notifications(snapshot: Snapshot, intent: i.ClearNotifications, now: datetime) -> Snapshot:
    return replace(snapshot, notifications=())


@handles(i.PruneNotifications)
def _prune(snapshot: Snapshot, intent: i.PruneNotifications, now: datetime) -> Snapshot:
    # apply() prunes after every transition; this intent exists for the periodic tick
    return snapshot
