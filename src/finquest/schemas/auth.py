"""Pydantic schemas for authentication endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

from finquest.models.user import UserLevel
from finquest.schemas.common import CamelModel

MOBILE_PATTERN = r"^[0-9]{10}$"


def clean_name(value: str) -> str:
    """Trim a display name; blank names are rejected."""
    value = value.strip()
    if not value:
        raise PydanticCustomError("name_required", "Name is required")
    return value


class UserRegister(CamelModel):
    """Request model for user registration."""

    name: str = Field(..., min_length=1, max_length=50, description="Display name")
    mobile: str = Field(..., pattern=MOBILE_PATTERN, description="10-digit mobile number")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return clean_name(value)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()


class LoginRequest(CamelModel):
    """Request model for user login."""

    identifier: str = Field(..., min_length=1, description="Mobile number or email")
    password: str = Field(..., min_length=1, description="User password")


class UserSummary(CamelModel):
    """User data safe to return to clients (no password, no tokens)."""

    id: UUID
    name: str
    mobile: str
    email: str
    coins: int
    level: UserLevel
    completed_quiz: bool


class UserProfile(UserSummary):
    created_at: datetime
    updated_at: datetime


class UserData(CamelModel):
    user: UserSummary


class ProfileData(CamelModel):
    user: UserProfile


class AuthData(CamelModel):
    """Payload of register/login responses."""

    user: UserSummary
    token: str = Field(..., description="JWT access token")


class TokenData(CamelModel):
    token: str = Field(..., description="New JWT access token")
