"""Pydantic schemas for profile and gamification endpoints."""

from pydantic import EmailStr, Field, field_validator

from finquest.models.user import UserLevel
from finquest.schemas.auth import clean_name
from finquest.schemas.common import CamelModel


class ProfileUpdate(CamelModel):
    """Partial profile update; omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=50)
    email: EmailStr | None = None
    coins: int | None = Field(None, ge=0)
    level: UserLevel | None = None
    completed_quiz: bool | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str | None) -> str | None:
        return clean_name(value) if value is not None else value

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value


class CoinsUpdate(CamelModel):
    coins: int = Field(..., ge=0, description="New coin balance (non-negative)")


class QuizCompletion(CamelModel):
    coins: int = Field(..., ge=0, description="Coin balance after the quiz")
    level: UserLevel = Field(..., description="Level reached")


class CoinsData(CamelModel):
    coins: int
