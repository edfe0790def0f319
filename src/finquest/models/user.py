"""User model holding identity and gamification state."""
import enum

from sqlalchemy import JSON, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finquest.models.base import BaseModel


class UserLevel(str, enum.Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class User(BaseModel):
    """User model representing a registered learner."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    mobile: Mapped[str] = mapped_column(String(10), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    coins: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    level: Mapped[str] = mapped_column(
        String(20), default=UserLevel.BEGINNER.value, nullable=False
    )
    completed_quiz: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Active refresh tokens; logout removes one, refresh checks membership.
    refresh_tokens: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction", back_populates="user", lazy="raise", passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, mobile={self.mobile}, level={self.level})>"
