"""
User Pydantic schemas.

Defines request and response models for user management.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from fleetflow.app.models.enums import UserRole


class UserCreate(BaseModel):
    """Schema for an admin creating a user."""
    username: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    pin: str = Field(..., min_length=1, max_length=12, description="Initial numeric PIN")
    role: UserRole = Field(default=UserRole.USER)
    avatar_url: Optional[str] = Field(None, max_length=500)


class UserUpdate(BaseModel):
    """Schema for an admin updating a user."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[UserRole] = None
    pin: Optional[str] = Field(None, min_length=1, max_length=12, description="Reset PIN")
    avatar_url: Optional[str] = Field(None, max_length=500)


class UserResponse(BaseModel):
    """Schema for user information response."""
    id: int
    username: str
    name: str
    role: UserRole
    avatar_url: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserDirectoryEntry(BaseModel):
    """Minimal user listing used to pick trip companions."""
    id: int
    name: str
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
