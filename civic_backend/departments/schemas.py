from pydantic import BaseModel, validator
from typing import List, Optional

from civic_backend.reports.schemas import ReportCategory


class ResponsibleArea(BaseModel):
    """GeoJSON polygon: a list of closed linear rings of [lng, lat] pairs."""
    type: str = "Polygon"
    coordinates: List[List[List[float]]]

    @validator('type')
    def validate_type(cls, v):
        if v != "Polygon":
            raise ValueError('Responsible area must be a Polygon')
        return v

    @validator('coordinates')
    def validate_rings(cls, v):
        if not v:
            raise ValueError('Polygon needs at least one ring')
        for ring in v:
            if len(ring) < 4 or ring[0] != ring[-1]:
                raise ValueError('Each ring needs at least 4 positions and must be closed')
            for position in ring:
                if len(position) != 2:
                    raise ValueError('Positions must be [lng, lat] pairs')
                lng, lat = position
                if not -180 <= lng <= 180 or not -90 <= lat <= 90:
                    raise ValueError('Polygon coordinates out of range')
        return v


class Department(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    categories: List[ReportCategory] = []
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    supervisors: List[str] = []
    responsible_area: Optional[ResponsibleArea] = None
    active: bool = True
    created_at: str


class DepartmentCreate(BaseModel):
    name: str
    description: Optional[str] = None
    categories: List[ReportCategory] = []
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    supervisors: List[str] = []
    responsible_area: Optional[ResponsibleArea] = None
    active: bool = True

    @validator('name')
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Department name is required')
        return v


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    categories: Optional[List[ReportCategory]] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    supervisors: Optional[List[str]] = None
    responsible_area: Optional[ResponsibleArea] = None
    active: Optional[bool] = None

    @validator('name')
    def validate_name(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError('Department name cannot be blank')
        return v
