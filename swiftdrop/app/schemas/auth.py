"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from pydantic import EmailStr, Field
from datetime import datetime
from swiftdrop.app.models.enums import UserRole
from swiftdrop.app.schemas.common import CamelModel


class UserRegister(CamelModel):
    """
    Schema for user registration.

    Used by POST /auth/register endpoint.
    Default role is sender.
    """
    email: EmailStr = Field(..., description="User email address")
    username: str = Field(..., min_length=3, max_length=50, description="Unique username")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    role: UserRole = Field(default=UserRole.SENDER, description="User role (defaults to sender)")


class UserLogin(CamelModel):
    """
    Schema for user login.

    Supports login with either username or email.
    """
    username: str = Field(..., description="Username or email")
    password: str = Field(..., description="Password")


class RefreshRequest(CamelModel):
    """Schema for exchanging a refresh token."""
    refresh_token: str = Field(..., description="Refresh token issued at login")


class TokenResponse(CamelModel):
    """
    Schema for JWT token response.

    Returned by successful login/register/refresh operations.
    """
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    user_id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    email: str = Field(..., description="Email address")
    role: UserRole = Field(..., description="User role")


class UserResponse(CamelModel):
    """
    Schema for user information response.

    Used by GET /auth/me and GET /users.
    """
    id: int
    email: str
    username: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime
