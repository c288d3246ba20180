"""
Base repository with common CRUD operations.

Every row a user can see (tracks, synthesis jobs) carries a `user_id`;
the owned_* helpers scope lookups to it so that another user's id
behaves exactly like a missing one.

Usage:
    class RaceRepository(BaseRepository[Race]):
        def __init__(self, db: AsyncSession):
            super().__init__(db, Race)

        async def list_for_user(self, user_id: str) -> list[Race]:
            return await self.get_all(user_id=user_id)
"""

from typing import Any, Generic, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository for database operations.

    All methods are async for use with AsyncSession. Writes are flushed,
    committing is left to the caller.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: str) -> T | None:
        """Get entity by primary key."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_owned(self, id: str, user_id: str) -> T | None:
        """Get entity by primary key if it belongs to `user_id`."""
        return await self.get_by(id=id, user_id=user_id)

    async def get_by(self, **kwargs: Any) -> T | None:
        """
        Get single entity by arbitrary field values.

        Args:
            **kwargs: Field name-value pairs to filter by

        Returns:
            First matching entity or None
        """
        query = select(self.model)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def get_all(self, order_by: Any = None, limit: int | None = None, **kwargs: Any) -> list[T]:
        """
        Get all entities matching criteria.

        Args:
            order_by: Optional column expression to sort by
            limit: Optional maximum number of rows
            **kwargs: Field name-value pairs to filter by

        Returns:
            List of matching entities
        """
        query = select(self.model)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        if order_by is not None:
            query = query.order_by(order_by)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create(self, **kwargs: Any) -> T:
        """Create new entity and return it with generated fields loaded."""
        entity = self.model(**kwargs)
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def update(self, entity: T, **kwargs: Any) -> T:
        """Update entity fields."""
        for key, value in kwargs.items():
            setattr(entity, key, value)
        await self.db.flush()
        return entity

    async def delete(self, entity: T) -> None:
        """Delete entity."""
        await self.db.delete(entity)
        await self.db.flush()

    async def count(self, **kwargs: Any) -> int:
        """Count entities matching criteria."""
        query = select(func.count()).select_from(self.model)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        result = await self.db.execute(query)
        return result.scalar() or 0
