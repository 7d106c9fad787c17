"""
User Pydantic schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from zapshift.app.models.enums import UserRole
from zapshift.app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Schema for sign-in registration. Email defaults to the token's email."""
    email: Optional[str] = Field(None, max_length=255)
    name: Optional[str] = Field(None, max_length=150)
    photo_url: Optional[str] = Field(None, max_length=500)


class UserResponse(CamelModel):
    id: int
    email: str
    name: Optional[str] = None
    photo_url: Optional[str] = None
    role: UserRole
    created_at: datetime
    last_login_at: datetime


class UserRegistrationResponse(CamelModel):
    created: bool
    message: str
    user: UserResponse


class UserRoleResponse(CamelModel):
    email: str
    role: UserRole


class RoleUpdateRequest(CamelModel):
    role: UserRole


class UserSearchResponse(CamelModel):
    users: List[UserResponse]
    total: int
