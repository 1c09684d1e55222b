from pydantic import BaseModel, EmailStr, Field
from typing import FrozenSet, List, Optional
from datetime import datetime
from enum import Enum

class AdminRole(str, Enum):
    """Admin role enumeration"""
    SUPER_ADMIN = "super-admin"
    PARK_ADMIN = "park-admin"
    TICKET_CHECKER = "ticket-checker"
    USER = "user"

class Actor(BaseModel):
    """The authenticated principal performing an action.

    Passed explicitly into every service call. ``role`` is kept as a plain
    string so that unknown or retired roles are denied by the guard instead
    of failing to parse.
    """
    user_id: Optional[int] = None
    role: str
    assigned_parks: FrozenSet[int] = frozenset()

# Login
class LoginRequest(BaseModel):
    email: EmailStr
    password: str

# Admin users
class AdminUserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: AdminRole = AdminRole.USER

class AdminUserCreate(AdminUserBase):
    password: str = Field(..., min_length=6)
    assigned_park_ids: List[int] = []

class AdminUserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[AdminRole] = None
    is_active: Optional[bool] = None
    assigned_park_ids: Optional[List[int]] = None

class AdminUser(AdminUserBase):
    id: int
    is_active: bool
    assigned_park_ids: List[int] = []
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AuthResponse(BaseModel):
    access_token: str
    token_type: str
    user: AdminUser
