"""
Synthesis service.

Job creation and polling for API routes, job execution for the background
worker, and promotion of results into the track library.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from volt.config import settings
from volt.features.gpx import GPXParserService
from volt.features.races import Race, RaceRepository, RaceService, TrackMetrics
from .models import JobStatus, SynthesisJob, SynthesisResultRecord
from .network import Bounds
from .repository import SynthesisJobRepository, SynthesisResultRepository
from .schemas import (
    BoundsSchema,
    RoutePoint,
    RouteSchema,
    SynthesisJobResponse,
    SynthesisRequest,
    SynthesisResultResponse,
)
from .search import SearchOutcome, synthesize

logger = logging.getLogger(__name__)


class SynthesisError(ValueError):
    """Synthesis request or job failure with a client-facing code."""

    def __init__(self, message: str, code: str = "synthesis_error"):
        super().__init__(message)
        self.code = code


class SynthesisService:
    """Route synthesis operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.jobs = SynthesisJobRepository(db)
        self.results = SynthesisResultRepository(db)
        self.races = RaceRepository(db)

    # =========================================================================
    # API side
    # =========================================================================

    async def create_job(self, user_id: str, request: SynthesisRequest) -> SynthesisJob:
        """
        Persist a queued job. The caller hands its id to the worker.

        Raises:
            SynthesisError: If the reference track does not exist for this user
        """
        reference = await self.races.get_owned(request.reference_race_id, user_id)
        if not reference:
            raise SynthesisError("Reference track not found", code="reference_not_found")

        job = await self.jobs.create(
            user_id=user_id,
            reference_race_id=reference.id,
            bounding_box=request.bounding_box.model_dump(),
            rolling_window=request.rolling_window,
            max_results=min(request.max_results, settings.synthesis_max_results),
            status=JobStatus.QUEUED.value,
        )
        await self.db.commit()
        logger.info(f"Queued synthesis job {job.id} for race {reference.id}")
        return job

    async def get_job(self, user_id: str, job_id: str) -> Optional[SynthesisJob]:
        return await self.jobs.get_owned(job_id, user_id)

    async def list_jobs(self, user_id: str, limit: int = 20) -> List[SynthesisJob]:
        return await self.jobs.list_for_user(user_id, limit=limit)

    async def get_result(
        self, user_id: str, job_id: str, result_id: str
    ) -> Optional[Tuple[SynthesisJob, SynthesisResultRecord]]:
        job = await self.jobs.get_owned(job_id, user_id)
        if not job:
            return None
        result = await self.results.get_for_job(job_id, result_id)
        if not result:
            return None
        return job, result

    async def save_result(self, user_id: str, job_id: str, result_id: str, name: str) -> Optional[Race]:
        """
        Promote a result to a library track.

        Metrics are copied from the result as stored, not recomputed.
        """
        found = await self.get_result(user_id, job_id, result_id)
        if not found:
            return None
        _, result = found

        race = await RaceService(self.db).create(
            user_id=user_id,
            name=name,
            points=GPXParserService.parse_points(result.points),
            metrics=TrackMetrics(
                distance_km=result.distance_km,
                elevation_gain_m=result.elevation_gain_m,
                elevation_loss_m=result.elevation_loss_m,
                itra_effort_distance=result.itra_effort_distance,
            ),
            source="synthesis",
            source_job_id=job_id,
            source_result_id=result_id,
        )
        logger.info(f"Saved synthesis result {result_id} as race {race.id}")
        return race

    # =========================================================================
    # Worker side
    # =========================================================================

    async def run_job(self, job_id: str) -> Optional[SynthesisJob]:
        """
        Execute a job and store its results.

        Jobs already complete or failed are left alone. Any error marks the
        job failed with the message; it is not re-raised.
        """
        job = await self.jobs.get_by_id(job_id)
        if not job:
            logger.warning(f"Synthesis job {job_id} disappeared before running")
            return None
        if job.status in (JobStatus.COMPLETE.value, JobStatus.FAILED.value):
            return job

        await self.jobs.update(job, status=JobStatus.RUNNING.value, started_at=datetime.utcnow(), error=None)
        await self.db.commit()

        try:
            outcome = await self._search(job)
        except Exception as e:
            logger.exception(f"Synthesis job {job_id} failed: {e}")
            await self.db.rollback()
            job = await self.jobs.get_by_id(job_id)
            await self.jobs.update(
                job,
                status=JobStatus.FAILED.value,
                error=str(e) or e.__class__.__name__,
                completed_at=datetime.utcnow(),
            )
            await self.db.commit()
            return job

        for rank, candidate in enumerate(outcome.candidates, start=1):
            await self.results.create(
                job_id=job.id,
                rank=rank,
                distance_km=candidate.metrics.distance_km,
                elevation_gain_m=candidate.metrics.elevation_gain_m,
                elevation_loss_m=candidate.metrics.elevation_loss_m,
                itra_effort_distance=candidate.metrics.itra_effort_distance,
                similarity_score=candidate.similarity_score,
                points=[
                    {"lat": p.lat, "lon": p.lon, "ele": p.ele}
                    for p in candidate.points
                ],
            )
        await self.jobs.update(
            job,
            status=JobStatus.COMPLETE.value,
            candidates_considered=outcome.walks_considered,
            completed_at=datetime.utcnow(),
        )
        await self.db.commit()
        await self.db.refresh(job, attribute_names=["results"])
        logger.info(f"Synthesis job {job_id} complete: {len(outcome.candidates)} results")
        return job

    async def _search(self, job: SynthesisJob) -> SearchOutcome:
        reference = await self.races.get_owned(job.reference_race_id, job.user_id)
        if not reference:
            raise SynthesisError("Reference track no longer exists", code="reference_not_found")

        scope_user = None if settings.synthesis_corpus_scope == "all" else job.user_id
        corpus = [RaceService.points(race) for race in await self.races.list_corpus(scope_user)]
        box = job.bounding_box

        return await asyncio.to_thread(
            synthesize,
            RaceService.points(reference),
            corpus,
            Bounds(north=box["north"], south=box["south"], east=box["east"], west=box["west"]),
            job.rolling_window,
            job.max_results,
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    @staticmethod
    def to_response(job: SynthesisJob) -> SynthesisJobResponse:
        """Job payload; results only once the job is complete."""
        results = []
        if job.status == JobStatus.COMPLETE.value:
            results = [SynthesisService.result_response(r) for r in job.results]
        return SynthesisJobResponse(
            id=job.id,
            status=JobStatus(job.status),
            reference_race_id=job.reference_race_id,
            bounding_box=BoundsSchema(**job.bounding_box),
            rolling_window=job.rolling_window,
            max_results=job.max_results,
            error=job.error,
            candidates_considered=job.candidates_considered,
            created_at=job.created_at,
            started_at=job.started_at,
            completed_at=job.completed_at,
            results=results,
        )

    @staticmethod
    def result_response(result: SynthesisResultRecord) -> SynthesisResultResponse:
        return SynthesisResultResponse(
            id=result.id,
            rank=result.rank,
            distance_km=result.distance_km,
            elevation_gain_m=result.elevation_gain_m,
            elevation_loss_m=result.elevation_loss_m,
            itra_effort_distance=result.itra_effort_distance,
            similarity_score=result.similarity_score,
            route=RouteSchema(points=[RoutePoint(**p) for p in result.points]),
        )
