"""Pydantic schemas for user operations."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from sidesa.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_ROLE_NAME_LENGTH,
    MAX_USERNAME_LENGTH,
    MIN_PASSWORD_LENGTH,
    MIN_USERNAME_LENGTH,
)
from sidesa.core.permissions.schemas import PermissionResponse


class UserStatus(StrEnum):
    """Account status filter for user listings."""

    ACTIVE = "active"
    INACTIVE = "inactive"


# ============================================================
# User Schemas
# ============================================================


class UserBase(BaseModel):
    """Base schema for user data."""

    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)


class UserCreate(UserBase):
    """Schema for creating a new user."""

    username: str = Field(
        ..., min_length=MIN_USERNAME_LENGTH, max_length=MAX_USERNAME_LENGTH
    )
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )
    role: str = Field(..., min_length=1, max_length=MAX_ROLE_NAME_LENGTH)


class UserUpdate(BaseModel):
    """Schema for updating user data. Omitted fields are left unchanged."""

    email: EmailStr | None = None
    full_name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    role: str | None = Field(None, min_length=1, max_length=MAX_ROLE_NAME_LENGTH)


class UserStatusUpdate(BaseModel):
    """Schema for activating or deactivating a user."""

    is_active: bool


class RoleSummary(BaseModel):
    """Role reference embedded in user responses."""

    id: UUID
    name: str
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserBase):
    """Schema for user response data."""

    id: UUID
    username: str
    role: RoleSummary
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserListResponse(BaseModel):
    """Schema for listing users."""

    items: list[UserResponse]
    total: int
    page: int
    page_size: int


class UserPermissionsResponse(BaseModel):
    """Effective permissions of a user, derived from their role."""

    user_id: UUID
    role: str
    permissions: list[PermissionResponse]


# ============================================================
# Authentication Schemas
# ============================================================


class LoginRequest(BaseModel):
    """Schema for login with username (or email) and password."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Schema for authentication token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token expiration in seconds")


class MeResponse(UserResponse):
    """Current user profile with effective permission identifiers."""

    permissions: list[str]


class ChangePasswordRequest(BaseModel):
    """Schema for changing the current user's password."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )
    confirm_password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def passwords_match(self) -> "ChangePasswordRequest":
        """Ensure the confirmation matches the new password."""
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self
