"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional
from fleetflow.app.models.enums import UserRole


class UserLogin(BaseModel):
    """
    Schema for user login.

    Used by POST /auth/login endpoint.
    """
    username: str = Field(..., min_length=1, description="Username")
    pin: str = Field(..., min_length=1, max_length=12, description="Numeric PIN")


class PinChange(BaseModel):
    """Schema for changing one's own PIN."""
    current_pin: str = Field(..., min_length=1, max_length=12)
    new_pin: str = Field(..., min_length=1, max_length=12)


class TokenResponse(BaseModel):
    """
    Schema for JWT token response.

    Returned by a successful login.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user_id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    name: str = Field(..., description="Display name")
    role: UserRole = Field(..., description="User role")
    avatar_url: Optional[str] = None
