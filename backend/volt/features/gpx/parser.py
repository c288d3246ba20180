"""
GPX Parser Service

Parses uploaded GPX documents into a cleaned, density-limited point list.
"""

import logging
from datetime import datetime
from typing import Any, List, NamedTuple, Optional

import gpxpy
import gpxpy.gpx

from volt.config import settings
from volt.shared.elevation import clean_elevations
from volt.shared.geo import haversine

logger = logging.getLogger(__name__)

# Consecutive points closer than this (degrees) are duplicates
DUPLICATE_TOLERANCE_DEG = 0.000001


class TrackPoint(NamedTuple):
    """A point on a track. Indexable as (lat, lon, ele, time)."""
    lat: float
    lon: float
    ele: float
    time: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"lat": self.lat, "lon": self.lon, "ele": self.ele}
        if self.time is not None:
            data["time"] = self.time
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackPoint":
        return cls(
            lat=float(data["lat"]),
            lon=float(data["lon"]),
            ele=float(data.get("ele") or 0.0),
            time=data.get("time"),
        )


class GPXParseError(ValueError):
    """GPX content could not be turned into a usable track."""

    def __init__(self, message: str, code: str = "invalid_gpx"):
        super().__init__(message)
        self.code = code


class ParsedGPX(NamedTuple):
    """Result of parsing: cleaned points plus the document's own name."""
    points: List[TrackPoint]
    name: Optional[str]


class GPXParserService:
    """Service for parsing GPX files."""

    @staticmethod
    def parse(content: bytes) -> ParsedGPX:
        """
        Parse GPX content into cleaned track points.

        Points come from tracks, else routes, else waypoints. The result is
        de-duplicated, downsampled to `gpx_max_points`, thinned to
        `gpx_min_point_distance_m` spacing and has its elevations repaired.

        Args:
            content: GPX file content as bytes

        Returns:
            ParsedGPX with at least two points

        Raises:
            GPXParseError: If the GPX is malformed or has too few points
        """
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise GPXParseError(f"GPX file is not valid UTF-8: {e}")

        try:
            gpx = gpxpy.parse(text)
        except gpxpy.gpx.GPXException as e:
            logger.error(f"Failed to parse GPX: {e}")
            raise GPXParseError(f"Invalid GPX file: {e}")

        raw = GPXParserService._collect_points(gpx)
        if not raw:
            raise GPXParseError("GPX file contains no track, route or waypoint points", code="empty_track")

        points = GPXParserService.optimize_points(raw)
        if len(points) < 2:
            raise GPXParseError(
                "GPX file needs at least two distinct points",
                code="insufficient_points",
            )

        name = gpx.name or (gpx.tracks[0].name if gpx.tracks else None)
        logger.info(f"Parsed GPX: {len(raw)} raw points -> {len(points)} kept")
        return ParsedGPX(points=points, name=name)

    @staticmethod
    def _collect_points(gpx: gpxpy.gpx.GPX) -> List[tuple]:
        """Extract (lat, lon, elevation|None, time|None) from the document."""
        sources: List[List[Any]] = [
            [p for track in gpx.tracks for segment in track.segments for p in segment.points],
            [p for route in gpx.routes for p in route.points],
            list(gpx.waypoints),
        ]
        for source in sources:
            if source:
                return [
                    (p.latitude, p.longitude, p.elevation, _format_time(p.time))
                    for p in source
                ]
        return []

    @staticmethod
    def optimize_points(raw: List[tuple]) -> List[TrackPoint]:
        """
        Strip duplicates, cap density and repair elevations.

        Args:
            raw: (lat, lon, elevation|None, time|None) tuples in route order

        Returns:
            Cleaned TrackPoints
        """
        if not raw:
            return []

        deduped = [raw[0]]
        for point in raw[1:]:
            last = deduped[-1]
            if (
                abs(point[0] - last[0]) < DUPLICATE_TOLERANCE_DEG
                and abs(point[1] - last[1]) < DUPLICATE_TOLERANCE_DEG
            ):
                continue
            deduped.append(point)

        if len(deduped) > settings.gpx_max_points:
            logger.info(f"Reducing points from {len(deduped)} to {settings.gpx_max_points}")
            deduped = downsample(deduped, settings.gpx_max_points)

        thinned = [deduped[0]]
        for point in deduped[1:]:
            last = thinned[-1]
            gap_m = haversine(last[0], last[1], point[0], point[1]) * 1000
            if gap_m >= settings.gpx_min_point_distance_m:
                thinned.append(point)

        if len(thinned) > 1 and thinned[-1] is not deduped[-1]:
            thinned.append(deduped[-1])

        elevations = clean_elevations([p[2] for p in thinned])
        return [
            TrackPoint(lat=p[0], lon=p[1], ele=ele, time=p[3])
            for p, ele in zip(thinned, elevations)
        ]

    @staticmethod
    def parse_points(data: List[dict[str, Any]]) -> List[TrackPoint]:
        """Rebuild TrackPoints from their stored JSON form."""
        return [TrackPoint.from_dict(item) for item in data]


def downsample(points: List[Any], target_count: int) -> List[Any]:
    """
    Evenly sample `points` down to exactly `target_count`, keeping both ends.
    """
    if len(points) <= target_count:
        return list(points)

    step = (len(points) - 1) / (target_count - 1)
    return [points[round(i * step)] for i in range(target_count)]


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
