"""
Race Routes

Track library: upload, list, get, delete, GPX export and analytics.
"""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from volt.api.deps import get_current_user
from volt.config import settings
from volt.db.session import get_async_db
from volt.features.gpx import GPXParseError, build_gpx, gpx_filename
from volt.features.races import (
    ElevationProfileResponse,
    GradientDistributionResponse,
    MetricsResponse,
    Race,
    RaceService,
    TrackResponse,
    UploadError,
)
from volt.features.users import User
from volt.shared.errors import ApiError, not_found

router = APIRouter()

_UPLOAD_STATUS = {
    "invalid_file_type": 400,
    "empty_file": 400,
    "file_too_large": 413,
}


def _window_size():
    return Query(
        settings.default_window_size,
        ge=settings.min_window_size,
        le=settings.max_window_size,
        description="Rolling window in metres",
    )


async def _get_race(race_id: str, user: User, db: AsyncSession) -> Race:
    race = await RaceService(db).get(user.id, race_id)
    if not race:
        raise not_found("Track")
    return race


@router.post("", response_model=TrackResponse, status_code=201)
async def upload_race(
    file: UploadFile = File(...),
    name: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Upload a GPX file into the library.

    Raw distance, gain/loss and ITRA effort are computed here, once.
    """
    content = await file.read()
    try:
        race = await RaceService(db).upload(
            user_id=user.id,
            filename=file.filename,
            content=content,
            content_type=file.content_type,
            name=name,
        )
    except UploadError as e:
        raise ApiError(_UPLOAD_STATUS.get(e.code, 400), str(e), code=e.code)
    except GPXParseError as e:
        raise ApiError(422, str(e), code=e.code)

    return RaceService.to_response(race)


@router.get("", response_model=List[TrackResponse])
async def list_races(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """User's tracks, newest first."""
    races = await RaceService(db).list(user.id)
    return [RaceService.to_response(race) for race in races]


@router.get("/{race_id}", response_model=TrackResponse)
async def get_race(
    race_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Single track, with smoothed metrics at the default window."""
    race = await _get_race(race_id, user, db)
    return RaceService.to_response(race, window_size=settings.default_window_size)


@router.delete("/{race_id}", status_code=204)
async def delete_race(
    race_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    if not await RaceService(db).delete(user.id, race_id):
        raise not_found("Track")
    return Response(status_code=204)


@router.get("/{race_id}/download")
async def download_race(
    race_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Export the stored points as GPX 1.1."""
    race = await _get_race(race_id, user, db)
    xml = build_gpx(race.name, RaceService.points(race))
    return Response(
        content=xml,
        media_type="application/gpx+xml",
        headers={"Content-Disposition": f'attachment; filename="{gpx_filename(race.name)}"'},
    )


# =============================================================================
# Analytics
# =============================================================================

@router.get("/{race_id}/elevation", response_model=ElevationProfileResponse)
async def get_elevation_profile(
    race_id: str,
    window_size: int = _window_size(),
    smoothed: bool = Query(True),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Cumulative distance (km) and elevation (m) series."""
    race = await _get_race(race_id, user, db)
    series = RaceService.analytics(race).series(window_size, smoothed)
    return ElevationProfileResponse(
        distance=[round(d / 1000, 4) for d in series.distances_m],
        elevation=[round(e, 2) for e in series.elevations],
        smoothed=smoothed,
        window_size=window_size,
    )


@router.get("/{race_id}/gradient", response_model=GradientDistributionResponse)
async def get_gradient_distribution(
    race_id: str,
    window_size: int = _window_size(),
    smoothed: bool = Query(True),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Ascent/descent distance per gradient bin."""
    race = await _get_race(race_id, user, db)
    histogram = RaceService.analytics(race).gradient_distribution(window_size, smoothed)
    return GradientDistributionResponse(
        ascent=[asdict(b) for b in histogram.ascent],
        descent=[asdict(b) for b in histogram.descent],
        smoothed=smoothed,
        window_size=window_size,
    )


@router.get("/{race_id}/metrics", response_model=MetricsResponse)
async def get_metrics(
    race_id: str,
    window_size: int = _window_size(),
    smoothed: bool = Query(True),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Gain/loss/effort from the same series as /elevation and /gradient."""
    race = await _get_race(race_id, user, db)
    metrics = RaceService.analytics(race).metrics(window_size, smoothed)
    return MetricsResponse(
        distance_km=metrics.distance_km,
        elevation_gain_m=metrics.elevation_gain_m,
        elevation_loss_m=metrics.elevation_loss_m,
        itra_effort_distance=metrics.itra_effort_distance,
        smoothed=smoothed,
        window_size=window_size,
    )
