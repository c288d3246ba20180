"""
Races (track library) module.

Usage:
    from volt.features.races import RaceService, TrackAnalytics

Components:
- Race: SQLAlchemy model
- RaceRepository: data access
- RaceService: upload / list / get / delete
- TrackAnalytics: elevation profile, gradient distribution, metrics
"""

from .models import Race
from .repository import RaceRepository
from .analytics import TrackAnalytics, TrackMetrics, ElevationSeries, compute_metrics
from .schemas import (
    TrackResponse,
    ElevationProfileResponse,
    GradientDistributionResponse,
    MetricsResponse,
)
from .service import RaceService, UploadError

__all__ = [
    # Model
    "Race",
    # Repository
    "RaceRepository",
    # Analytics
    "TrackAnalytics",
    "TrackMetrics",
    "ElevationSeries",
    "compute_metrics",
    # Schemas
    "TrackResponse",
    "ElevationProfileResponse",
    "GradientDistributionResponse",
    "MetricsResponse",
    # Service
    "RaceService",
    "UploadError",
]
