from pydantic import BaseModel, EmailStr, validator
from enum import Enum
from typing import Optional


# USER ROLES
class UserRole(str, Enum):
    CITIZEN = "citizen"   # Submits and follows own reports
    ADMIN = "admin"       # Triages reports, manages departments


# USER REGISTRATION CONTRACT
class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    phone: str = ""
    admin_code: Optional[str] = None

    @validator('name')
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name is required')
        return v

    @validator('password')
    def validate_password(cls, v):
        if len(v) < 8:
            raise ValueError('Password must be at least 8 characters long')
        if len(v) > 72:
            raise ValueError("Password cannot exceed 72 characters")
        return v


# USER RESPONSE CONTRACT (no password hash)
class UserResponse(BaseModel):
    user_id: str
    name: str
    email: str
    role: UserRole
    phone: str = ""


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


# IDENTITY RESOLVED FROM A BEARER TOKEN
class CurrentUser(BaseModel):
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = UserRole.CITIZEN
