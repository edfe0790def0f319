"""User repository for identity and gamification queries."""
from uuid import UUID

from jose import JWTError
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from finquest.core.security import verify_refresh_token
from finquest.models.user import User
from finquest.repositories.base import BaseRepository


def _live_tokens(tokens: list[str]) -> list[str]:
    live = []
    for token in tokens:
        try:
            verify_refresh_token(token)
        except JWTError:
            continue
        live.append(token)
    return live


class UserRepository(BaseRepository[User]):
    """Repository for User model with authentication queries."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_mobile(self, mobile: str) -> User | None:
        result = await self.db.execute(select(User).where(User.mobile == mobile))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_by_identifier(self, identifier: str) -> User | None:
        """Find user by mobile number or email (used for login)."""
        identifier = identifier.strip()
        result = await self.db.execute(
            select(User).where(
                or_(User.mobile == identifier, User.email == identifier.lower())
            )
        )
        return result.scalars().first()

    async def find_conflict(self, mobile: str, email: str) -> User | None:
        """Return any user already holding this mobile or email."""
        result = await self.db.execute(
            select(User).where(or_(User.mobile == mobile, User.email == email.lower()))
        )
        return result.scalars().first()

    async def email_taken_by_other(self, email: str, user_id: UUID) -> bool:
        result = await self.db.execute(
            select(User.id).where(User.email == email.lower(), User.id != user_id)
        )
        return result.scalar_one_or_none() is not None

    async def add_refresh_token(self, user: User, token: str) -> User:
        """Store a new session token, dropping stored ones that have expired."""
        # Reassign so the JSON column is flagged dirty.
        user.refresh_tokens = [*_live_tokens(user.refresh_tokens or []), token]
        return await self.save(user)

    async def remove_refresh_token(self, user: User, token: str) -> bool:
        """Revoke a refresh token. Returns False when it was not stored."""
        tokens = list(user.refresh_tokens or [])
        if token not in tokens:
            return False
        user.refresh_tokens = [t for t in tokens if t != token]
        await self.db.commit()
        return True

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(User.id)))
        return int(result.scalar_one() or 0)

    async def total_coins(self) -> int:
        result = await self.db.execute(select(func.coalesce(func.sum(User.coins), 0)))
        return int(result.scalar_one() or 0)
