from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class NotificationType(str, Enum):
    PAYROLL = "payroll"
    ADVANCE = "advance"
    LEAVE = "leave"
    ATTENDANCE = "attendance"
    SYSTEM = "system"


class NotificationStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"


@dataclass(frozen=True)
class Notification:
    """Record of an observable state change"""
    id: str
    type: NotificationType
    title: str
    message: str
    created_at: datetime
    status: NotificationStatus = NotificationStatus.UNREAD
    target_id: Optional[str] = None
    target_type: Optional[str] = None
