"""Authentication and user schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.subscription_enums import UserRole


class SignInRequest(BaseModel):
    """Sign-in request with email and password."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class SignUpRequest(BaseModel):
    """Sign-up request with name, email and password."""

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class UserResponse(BaseModel):
    """User response model."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    """Authentication response with user and token."""

    user: UserResponse
    token: str
    expires_at: Optional[datetime] = None


class UserUpdateRequest(BaseModel):
    """Request to update user profile."""

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    password: Optional[str] = Field(None, min_length=6, max_length=128)


class ChangePasswordRequest(BaseModel):
    """Password change for the signed-in user."""

    current_password: str = Field(..., min_length=6, max_length=128, alias="currentPassword")
    new_password: str = Field(..., min_length=6, max_length=128, alias="newPassword")

    class Config:
        populate_by_name = True


class UserAdminUpdateRequest(BaseModel):
    """Update of a user account. Role and active flag are admin-only."""

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = Field(None, alias="isActive")

    class Config:
        populate_by_name = True


def user_to_response(user) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        role=user.role,
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )
