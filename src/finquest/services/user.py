"""Profile and gamification updates."""

import logging

from finquest.core.exceptions import ConflictError
from finquest.models.user import User, UserLevel
from finquest.repositories.transaction import TransactionRepository
from finquest.repositories.user import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, user_repo: UserRepository, transaction_repo: TransactionRepository):
        self.user_repo = user_repo
        self.transaction_repo = transaction_repo

    async def update_profile(self, user: User, changes: dict) -> User:
        """Apply the provided fields; an email held by another user is rejected."""
        email = changes.get("email")
        if email and await self.user_repo.email_taken_by_other(email, user.id):
            raise ConflictError("USER_002")

        if isinstance(changes.get("level"), UserLevel):
            changes["level"] = changes["level"].value

        updated = await self.user_repo.update(user.id, changes)
        logger.info("Profile updated", extra={"user_id": user.id})
        return updated

    async def update_coins(self, user: User, coins: int) -> User:
        return await self.user_repo.update(user.id, {"coins": coins})

    async def complete_quiz(self, user: User, coins: int, level: UserLevel) -> User:
        updated = await self.user_repo.update(
            user.id, {"coins": coins, "level": level.value, "completed_quiz": True}
        )
        logger.info("Quiz completed", extra={"user_id": user.id})
        return updated

    async def delete_account(self, user: User) -> None:
        """Delete the user together with their transaction history."""
        removed = await self.transaction_repo.delete_by_user(user.id)
        await self.user_repo.delete(user.id)
        logger.info(
            f"Account deleted with {removed} transactions", extra={"user_id": user.id}
        )
