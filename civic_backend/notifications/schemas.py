"""
Data models for user notifications and admin broadcast requests.
"""

from pydantic import BaseModel, validator
from enum import Enum
from typing import List, Optional

from civic_backend.authentication.schemas import UserRole


class NotificationType(str, Enum):
    report_status_change = "report_status_change"
    report_assigned = "report_assigned"
    report_resolved = "report_resolved"
    comment_added = "comment_added"
    admin_alert = "admin_alert"


class Notification(BaseModel):
    id: str
    recipient: str
    type: NotificationType
    title: str
    message: str
    related_report: Optional[str] = None
    related_department: Optional[str] = None
    read: bool = False
    read_at: Optional[str] = None
    created_at: str


class NotificationCreate(BaseModel):
    recipient: str
    type: NotificationType
    title: str
    message: str
    related_report: Optional[str] = None
    related_department: Optional[str] = None


class NotificationUpdate(BaseModel):
    read: bool = True


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class NotificationPage(BaseModel):
    notifications: List[Notification]
    unread_count: int
    pagination: Pagination


class RecipientType(str, Enum):
    user = "user"
    role = "role"
    all = "all"


class SendNotificationRequest(BaseModel):
    recipient_type: RecipientType
    recipient_id: Optional[str] = None
    recipient_email: Optional[str] = None
    role: UserRole = UserRole.CITIZEN
    title: str
    message: str
    type: NotificationType = NotificationType.admin_alert
    related_report_id: Optional[str] = None

    @validator('title', 'message')
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError('Title and message are required')
        return v


class DispatchResult(BaseModel):
    created: int
    notification_ids: List[str] = []
    failed_recipients: List[str] = []
