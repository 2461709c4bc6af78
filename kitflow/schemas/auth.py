from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from kitflow.models.user import UserRole
from kitflow.schemas.base import BaseResponseSchema


class SignInCodeRequest(BaseModel):
    """Ask for a one-time sign-in code by email."""
    email: EmailStr = Field(..., description="User email address")


class SignInCodeVerify(BaseModel):
    """Exchange a one-time code for an access token."""
    email: EmailStr = Field(..., description="User email address")
    code: str = Field(..., min_length=6, max_length=6, description="Code from the email")


class SignInCodeSent(BaseModel):
    email: str
    expires_in_minutes: int


class TokenResponse(BaseModel):
    """Token response schema."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration in seconds")


class UserResponse(BaseResponseSchema):
    id: UUID
    email: str
    name: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class UserRoleUpdate(BaseModel):
    role: UserRole


class CurrentRoleResponse(BaseModel):
    role: Optional[UserRole] = None
