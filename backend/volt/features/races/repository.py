"""
Race repository.

Data access layer for the Race model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from volt.shared.repository import BaseRepository
from .models import Race


class RaceRepository(BaseRepository[Race]):
    """Repository for Race operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Race)

    async def list_for_user(self, user_id: str) -> list[Race]:
        """User's tracks, newest first."""
        return await self.get_all(
            order_by=Race.created_at.desc(),
            user_id=user_id,
        )

    async def list_corpus(self, user_id: str | None = None) -> list[Race]:
        """
        Tracks available as trail network input.

        Args:
            user_id: Restrict to one user's library; None for all tracks

        Returns:
            Tracks ordered by id so that graph construction is stable
        """
        if user_id is None:
            return await self.get_all(order_by=Race.id)
        return await self.get_all(order_by=Race.id, user_id=user_id)
