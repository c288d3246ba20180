"""
Synthesis repositories.

Data access layer for SynthesisJob and SynthesisResultRecord models.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from volt.shared.repository import BaseRepository
from .models import JobStatus, SynthesisJob, SynthesisResultRecord


class SynthesisJobRepository(BaseRepository[SynthesisJob]):
    """Repository for synthesis jobs."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, SynthesisJob)

    async def list_for_user(self, user_id: str, limit: int = 20) -> list[SynthesisJob]:
        """Most recent jobs first."""
        return await self.get_all(
            order_by=SynthesisJob.created_at.desc(),
            limit=limit,
            user_id=user_id,
        )

    async def list_unfinished(self) -> list[SynthesisJob]:
        """Jobs still queued or running, oldest first."""
        result = await self.db.execute(
            select(SynthesisJob)
            .where(SynthesisJob.status.in_([JobStatus.QUEUED.value, JobStatus.RUNNING.value]))
            .order_by(SynthesisJob.created_at)
        )
        return list(result.scalars().all())


class SynthesisResultRepository(BaseRepository[SynthesisResultRecord]):
    """Repository for synthesis results."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, SynthesisResultRecord)

    async def get_for_job(self, job_id: str, result_id: str) -> SynthesisResultRecord | None:
        return await self.get_by(id=result_id, job_id=job_id)
