from datetime import datetime
from decimal import Decimal

import pytest

from hr_payroll.errors import InvalidInput
from hr_payroll.models import NotificationStatus, NotificationType
from hr_payroll.processors.notification_emitter import TEMPLATES, NotificationEvent, emit

NOW = datetime(2026, 3, 1, 8, 0)


def test_every_event_has_a_template():
    assert set(TEMPLATES) == set(NotificationEvent)


def test_advance_request_notification():
    notification = emit(NotificationEvent.ADVANCE_REQUESTED, NOW, target_id="adv-1",
                        employee_name="Mona Hassan", amount=Decimal('1500'))

    assert notification.type == NotificationType.ADVANCE
    assert notification.status == NotificationStatus.UNREAD
    assert notification.created_at == NOW
    assert notification.target_id == "adv-1"
    assert notification.target_type == "advance"
    assert "Mona Hassan" in notification.message
    assert "1,500.00 EGP" in notification.message


def test_payroll_notification_includes_period():
    notification = emit(NotificationEvent.PAYROLL_PAID, NOW, target_id="e1-2026-2",
                        employee_name="Omar", period="2026-02", amount=Decimal('9876.5'))
    assert notification.type == NotificationType.PAYROLL
    assert "2026-02" in notification.message
    assert "9,876.50 EGP" in notification.message


def test_employee_events_are_system_notifications():
    notification = emit(NotificationEvent.EMPLOYEE_ADDED, NOW, employee_name="Omar")
    assert notification.type == NotificationType.SYSTEM
    assert notification.target_id is None
    assert notification.target_type is None


def test_repeated_events_are_not_deduplicated():
    first = emit(NotificationEvent.EMPLOYEE_UPDATED, NOW, employee_name="Omar")
    second = emit(NotificationEvent.EMPLOYEE_UPDATED, NOW, employee_name="Omar")
    assert first.id != second.id
    assert first.message == second.message


def test_explicit_notification_id():
    notification = emit("employee_added", NOW, notification_id="n-1", employee_name="Omar")
    assert notification.id == "n-1"


def test_missing_context_is_rejected():
    with pytest.raises(InvalidInput):
        emit(NotificationEvent.INSTALLMENT_PAID, NOW, employee_name="Omar", amount=Decimal('10'))
