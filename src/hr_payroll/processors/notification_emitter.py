import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import InvalidInput
from ..models.notification import Notification, NotificationStatus, NotificationType
from ..utils.formatters import format_currency


class NotificationEvent(str, Enum):
    """Business events that produce exactly one notification each"""
    ADVANCE_REQUESTED = "advance_requested"
    ADVANCE_APPROVED = "advance_approved"
    ADVANCE_REJECTED = "advance_rejected"
    INSTALLMENT_OVERDUE = "installment_overdue"
    INSTALLMENT_PAID = "installment_paid"
    PAYROLL_GENERATED = "payroll_generated"
    PAYROLL_PROCESSED = "payroll_processed"
    PAYROLL_PAID = "payroll_paid"
    EMPLOYEE_ADDED = "employee_added"
    EMPLOYEE_UPDATED = "employee_updated"


@dataclass(frozen=True)
class NotificationTemplate:
    type: NotificationType
    title: str
    message: str
    target_type: str


TEMPLATES: Dict[NotificationEvent, NotificationTemplate] = {
    NotificationEvent.ADVANCE_REQUESTED: NotificationTemplate(
        NotificationType.ADVANCE, "New advance request",
        "{employee_name} requested an advance of {amount}", "advance"),
    NotificationEvent.ADVANCE_APPROVED: NotificationTemplate(
        NotificationType.ADVANCE, "Advance request approved",
        "The advance request of {employee_name} for {amount} was approved", "advance"),
    NotificationEvent.ADVANCE_REJECTED: NotificationTemplate(
        NotificationType.ADVANCE, "Advance request rejected",
        "The advance request of {employee_name} for {amount} was rejected", "advance"),
    NotificationEvent.INSTALLMENT_OVERDUE: NotificationTemplate(
        NotificationType.ADVANCE, "Overdue installment",
        "The advance of {employee_name} has an overdue installment", "advance"),
    NotificationEvent.INSTALLMENT_PAID: NotificationTemplate(
        NotificationType.ADVANCE, "Installment paid",
        "{employee_name} paid {amount} towards installment {number}", "advance"),
    NotificationEvent.PAYROLL_GENERATED: NotificationTemplate(
        NotificationType.PAYROLL, "Payroll generated",
        "Payroll for {employee_name} for {period} was generated with a net salary of {amount}", "payroll"),
    NotificationEvent.PAYROLL_PROCESSED: NotificationTemplate(
        NotificationType.PAYROLL, "Payroll processed",
        "The salary of {employee_name} was processed for {amount}", "payroll"),
    NotificationEvent.PAYROLL_PAID: NotificationTemplate(
        NotificationType.PAYROLL, "Salary paid",
        "The salary of {employee_name} for {period} was paid ({amount})", "payroll"),
    NotificationEvent.EMPLOYEE_ADDED: NotificationTemplate(
        NotificationType.SYSTEM, "New employee added",
        "Employee {employee_name} was added successfully", "employee"),
    NotificationEvent.EMPLOYEE_UPDATED: NotificationTemplate(
        NotificationType.SYSTEM, "Employee updated",
        "The details of employee {employee_name} were updated successfully", "employee"),
}


def emit(event: NotificationEvent, now: datetime, target_id: Optional[str] = None,
         notification_id: Optional[str] = None, **context: Any) -> Notification:
    """Derive the notification for one business event"""
    template = TEMPLATES[NotificationEvent(event)]
    values = {
        key: format_currency(value) if isinstance(value, Decimal) else value
        for key, value in context.items()
    }
    try:
        message = template.message.format(**values)
    except KeyError as e:
        raise InvalidInput(f"Missing {e.args[0]!r} for {NotificationEvent(event).value} notification")

    return Notification(
        id=notification_id or uuid.uuid4().hex,
        type=template.type,
        title=template.title,
        message=message,
        created_at=now,
        status=NotificationStatus.UNREAD,
        target_id=target_id,
        target_type=template.target_type if target_id else None,
    )
