"""Shared persistence helpers for the user and transaction repositories."""
from typing import Any, Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finquest.models.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Lookup by id plus commit-and-reload writes for one model.

    Every write commits immediately; callers never manage transactions.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: UUID) -> T | None:
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def save(self, obj: T) -> T:
        """Commit pending changes and reload ``obj`` (server defaults, ``updated_at``)."""
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def create(self, obj: T) -> T:
        self.db.add(obj)
        return await self.save(obj)

    async def update(self, id: UUID, changes: dict[str, Any]) -> T | None:
        """Apply ``changes`` to the row with ``id``; keys the model lacks are skipped.

        Returns None when no such row exists.
        """
        obj = await self.get_by_id(id)
        if obj is None:
            return None
        for field, value in changes.items():
            if hasattr(obj, field):
                setattr(obj, field, value)
        return await self.save(obj)

    async def delete(self, id: UUID) -> bool:
        obj = await self.get_by_id(id)
        if obj is None:
            return False
        await self.db.delete(obj)
        await self.db.commit()
        return True
