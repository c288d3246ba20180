"""
Synthesis Routes

Start route synthesis, poll jobs, download and save results.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from volt.api.deps import get_current_user
from volt.db.session import get_async_db
from volt.features.gpx import GPXParserService, build_gpx, gpx_filename
from volt.features.races import RaceService, TrackResponse
from volt.features.synthesis import (
    SaveResultRequest,
    SynthesisError,
    SynthesisJobResponse,
    SynthesisRequest,
    SynthesisService,
    synthesis_runner,
)
from volt.features.users import User
from volt.shared.errors import not_found

router = APIRouter()


@router.post("/generate", response_model=SynthesisJobResponse, status_code=202)
async def generate(
    request: SynthesisRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Queue a synthesis job and return it immediately.

    Poll GET /synthesis/results/{job_id} until status is complete or failed.
    """
    service = SynthesisService(db)
    try:
        job = await service.create_job(user.id, request)
    except SynthesisError:
        raise not_found("Reference track")

    await synthesis_runner.submit(job.id)
    return SynthesisService.to_response(job)


@router.get("/results", response_model=List[SynthesisJobResponse])
async def list_jobs(
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Recent jobs, newest first."""
    jobs = await SynthesisService(db).list_jobs(user.id, limit=limit)
    return [SynthesisService.to_response(job) for job in jobs]


@router.get("/results/{job_id}", response_model=SynthesisJobResponse)
async def get_job(
    job_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    job = await SynthesisService(db).get_job(user.id, job_id)
    if not job:
        raise not_found("Synthesis job")
    return SynthesisService.to_response(job)


@router.get("/results/{job_id}/download/{result_id}")
async def download_result(
    job_id: str,
    result_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Result route as a GPX 1.1 file."""
    found = await SynthesisService(db).get_result(user.id, job_id, result_id)
    if not found:
        raise not_found("Synthesis result")
    _, result = found

    name = f"Synthesized route {result.rank}"
    xml = build_gpx(
        name,
        GPXParserService.parse_points(result.points),
        description=f"Similarity {result.similarity_score:.4f}, effort {result.itra_effort_distance:.2f}",
    )
    return Response(
        content=xml,
        media_type="application/gpx+xml",
        headers={"Content-Disposition": f'attachment; filename="{gpx_filename(name)}"'},
    )


@router.post("/results/{job_id}/save/{result_id}", response_model=TrackResponse, status_code=201)
async def save_result(
    job_id: str,
    result_id: str,
    request: SaveResultRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Promote a result into the track library with its metrics unchanged."""
    race = await SynthesisService(db).save_result(user.id, job_id, result_id, request.name)
    if not race:
        raise not_found("Synthesis result")
    return RaceService.to_response(race)
