"""
Defines the data models and enums for civic issue reports.
"""

from pydantic import BaseModel, validator
from enum import Enum
from typing import List, Optional


class ReportCategory(str, Enum):
    pothole = "pothole"
    streetlight = "streetlight"
    trash = "trash"
    graffiti = "graffiti"
    water_leak = "water_leak"
    other = "other"


class ReportStatus(str, Enum):
    submitted = "submitted"
    in_review = "in_review"
    assigned = "assigned"
    in_progress = "in_progress"
    resolved = "resolved"
    rejected = "rejected"


class ReportPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class Location(BaseModel):
    type: str = "Point"
    coordinates: List[float]  # [longitude, latitude]
    address: str

    @validator('coordinates')
    def validate_coordinates(cls, v):
        if len(v) != 2:
            raise ValueError('Coordinates must be [longitude, latitude]')
        lng, lat = v
        if not -180 <= lng <= 180:
            raise ValueError('Longitude must be between -180 and 180')
        if not -90 <= lat <= 90:
            raise ValueError('Latitude must be between -90 and 90')
        return v

    @validator('address')
    def validate_address(cls, v):
        if not v.strip():
            raise ValueError('Address is required')
        return v


class StatusHistoryEntry(BaseModel):
    status: ReportStatus
    timestamp: str
    comment: Optional[str] = None


class Assignment(BaseModel):
    department: Optional[str] = None
    assigned_at: Optional[str] = None


class Report(BaseModel):
    id: str
    title: str
    description: str
    category: ReportCategory
    status: ReportStatus
    priority: ReportPriority
    location: Location
    images: List[str] = []
    submitted_by: str
    assigned_to: Optional[Assignment] = None
    status_history: List[StatusHistoryEntry]
    resolved_at: Optional[str] = None
    created_at: str
    updated_at: str
    version: int = 0


class ReportCreate(BaseModel):
    title: str
    description: str
    category: ReportCategory
    priority: ReportPriority = ReportPriority.medium
    location: Location
    images: List[str] = []

    @validator('title', 'description')
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Title and description are required')
        return v


class ReportUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ReportCategory] = None
    priority: Optional[ReportPriority] = None
    images: Optional[List[str]] = None
    status: Optional[ReportStatus] = None
    status_comment: Optional[str] = None
    department_id: Optional[str] = None  # admin only

    @validator('title', 'description')
    def not_blank(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Title and description cannot be blank')
        return v


class AdminReportUpdate(BaseModel):
    status: Optional[ReportStatus] = None
    admin_comment: Optional[str] = None
    department_id: Optional[str] = None


class ReportPage(BaseModel):
    items: List[Report]
    total: int
    page: int
    limit: int
    total_pages: int
