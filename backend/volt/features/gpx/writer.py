"""
GPX export.

Builds GPX 1.1 documents from stored point sequences. Output depends only
on the name and the points, so the same track always downloads as the
same bytes.
"""

from datetime import datetime
from typing import Iterable, Optional

import gpxpy.gpx

from .parser import TrackPoint

CREATOR = "Volt Platform"


def build_gpx(name: str, points: Iterable[TrackPoint], description: Optional[str] = None) -> str:
    """
    Render a single-track GPX document.

    Args:
        name: Track name (also used as the document name)
        points: Points in route order
        description: Optional document description

    Returns:
        GPX XML text
    """
    gpx = gpxpy.gpx.GPX()
    gpx.creator = CREATOR
    gpx.name = name
    gpx.description = description

    track = gpxpy.gpx.GPXTrack(name=name)
    segment = gpxpy.gpx.GPXTrackSegment()
    for point in points:
        segment.points.append(gpxpy.gpx.GPXTrackPoint(
            latitude=round(point.lat, 6),
            longitude=round(point.lon, 6),
            elevation=round(point.ele, 1),
            time=_parse_time(point.time),
        ))
    track.segments.append(segment)
    gpx.tracks.append(track)

    return gpx.to_xml(version="1.1")


def gpx_filename(name: str) -> str:
    """Safe download filename for a track name."""
    stem = "".join(c if c.isalnum() or c in "-_" else "_" for c in name).strip("_")
    return f"{stem or 'route'}.gpx"


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
