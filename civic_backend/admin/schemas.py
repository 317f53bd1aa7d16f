from pydantic import BaseModel
from typing import Dict, List

from civic_backend.authentication.schemas import UserResponse
from civic_backend.notifications.schemas import Pagination
from civic_backend.reports.schemas import Report


class AdminStats(BaseModel):
    total_reports: int
    status_counts: Dict[str, int]
    category_counts: Dict[str, int]
    recent_reports: List[Report]
    total_users: int
    total_departments: int
    avg_resolution_time_hours: float


class UserPage(BaseModel):
    users: List[UserResponse]
    pagination: Pagination


class SendNotificationResponse(BaseModel):
    message: str
    count: int
    failed_recipients: List[str] = []
