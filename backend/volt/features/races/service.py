"""
Race service.

Upload, listing, deletion and analytics of library tracks. Raw metrics are
computed once when a track is created; everything else is derived from the
stored points on each request.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from volt.config import settings
from volt.features.gpx import GPXParserService, TrackPoint
from .analytics import TrackAnalytics, TrackMetrics
from .models import Race
from .repository import RaceRepository
from .schemas import GPXData, PointSchema, TrackResponse

logger = logging.getLogger(__name__)

GPX_CONTENT_TYPES = ("application/gpx+xml",)


class UploadError(ValueError):
    """Upload rejected before parsing."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


class RaceService:
    """Track library operations for one request."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = RaceRepository(db)

    async def upload(
        self,
        user_id: str,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Race:
        """
        Validate, parse and store an uploaded GPX file.

        Raises:
            UploadError: Wrong file type, empty file or file too large
            GPXParseError: Content is not a usable GPX track
        """
        if not (filename or "").lower().endswith(".gpx") and content_type not in GPX_CONTENT_TYPES:
            raise UploadError("Only .gpx files are allowed", code="invalid_file_type")
        if len(content) == 0:
            raise UploadError("File is empty", code="empty_file")
        if len(content) > settings.max_upload_bytes:
            raise UploadError(
                f"File too large (max {settings.max_upload_mb}MB)",
                code="file_too_large",
            )

        parsed = GPXParserService.parse(content)
        title = (name or "").strip() or parsed.name or _name_from_filename(filename)
        metrics = TrackAnalytics(parsed.points).raw_metrics()

        race = await self.create(
            user_id=user_id,
            name=title,
            points=parsed.points,
            metrics=metrics,
            filename=filename,
            file_size=len(content),
        )
        logger.info(
            f"Uploaded race {race.id}: {race.distance_km}km, "
            f"+{race.elevation_gain_m}m, {len(parsed.points)} points"
        )
        return race

    async def create(
        self,
        user_id: str,
        name: str,
        points: List[TrackPoint],
        metrics: TrackMetrics,
        source: str = "upload",
        **provenance,
    ) -> Race:
        """Store a track with the given metrics, verbatim."""
        race = await self.repo.create(
            user_id=user_id,
            name=name[:255],
            points=[p.to_dict() for p in points],
            source=source,
            distance_km=metrics.distance_km,
            elevation_gain_m=metrics.elevation_gain_m,
            elevation_loss_m=metrics.elevation_loss_m,
            itra_effort_distance=metrics.itra_effort_distance,
            **provenance,
        )
        await self.db.commit()
        return race

    async def list(self, user_id: str) -> List[Race]:
        return await self.repo.list_for_user(user_id)

    async def get(self, user_id: str, race_id: str) -> Optional[Race]:
        return await self.repo.get_owned(race_id, user_id)

    async def delete(self, user_id: str, race_id: str) -> bool:
        """Delete a track. Returns False if it does not exist for this user."""
        race = await self.repo.get_owned(race_id, user_id)
        if not race:
            return False
        await self.repo.delete(race)
        await self.db.commit()
        logger.info(f"Deleted race {race_id}")
        return True

    @staticmethod
    def points(race: Race) -> List[TrackPoint]:
        return GPXParserService.parse_points(race.points)

    @staticmethod
    def analytics(race: Race) -> TrackAnalytics:
        return TrackAnalytics(RaceService.points(race))

    @staticmethod
    def to_response(race: Race, window_size: Optional[int] = None) -> TrackResponse:
        """
        Serialize a track.

        With `window_size` the smoothed_* fields are filled from the same
        computation the metrics endpoint uses.
        """
        response = TrackResponse(
            id=race.id,
            name=race.name,
            gpx_data=GPXData(points=[PointSchema(**p) for p in race.points]),
            distance_km=race.distance_km,
            elevation_gain_m=race.elevation_gain_m,
            elevation_loss_m=race.elevation_loss_m,
            itra_effort_distance=race.itra_effort_distance,
            source=race.source,
            filename=race.filename,
            source_job_id=race.source_job_id,
            source_result_id=race.source_result_id,
            created_at=race.created_at,
        )
        if window_size is not None:
            smoothed = RaceService.analytics(race).metrics(window_size, smoothed=True)
            response.smoothed_elevation_gain_m = smoothed.elevation_gain_m
            response.smoothed_elevation_loss_m = smoothed.elevation_loss_m
            response.smoothed_itra_effort_distance = smoothed.itra_effort_distance
            response.smoothing_window_size = window_size
        return response


def _name_from_filename(filename: Optional[str]) -> str:
    if not filename:
        return "Untitled track"
    stem = filename.rsplit("/", 1)[-1]
    if stem.lower().endswith(".gpx"):
        stem = stem[:-4]
    return stem or "Untitled track"
