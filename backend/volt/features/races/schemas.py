"""
Race schemas.

Pydantic models for track responses and the per-request analytics
(elevation profile, gradient distribution, metrics).
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PointSchema(BaseModel):
    """Single route point."""
    lat: float
    lon: float
    ele: float
    time: Optional[str] = None


class GPXData(BaseModel):
    points: List[PointSchema]


class TrackResponse(BaseModel):
    """Track in the user's library."""
    id: str
    name: str
    gpx_data: GPXData
    distance_km: float
    elevation_gain_m: float
    elevation_loss_m: float
    itra_effort_distance: float
    source: str = "upload"
    filename: Optional[str] = None
    source_job_id: Optional[str] = None
    source_result_id: Optional[str] = None
    created_at: Optional[datetime] = None

    # Computed at read time with the default window
    smoothed_elevation_gain_m: Optional[float] = None
    smoothed_elevation_loss_m: Optional[float] = None
    smoothed_itra_effort_distance: Optional[float] = None
    smoothing_window_size: Optional[int] = None


class ElevationProfileResponse(BaseModel):
    """Parallel distance (km) / elevation (m) series."""
    distance: List[float]
    elevation: List[float]
    smoothed: bool
    window_size: int


class GradientBinSchema(BaseModel):
    range: str
    percentage: float = Field(..., description="Share of this side's distance, %")
    distance: float = Field(..., description="Distance in this bin, km")


class GradientDistributionResponse(BaseModel):
    ascent: List[GradientBinSchema]
    descent: List[GradientBinSchema]
    smoothed: bool
    window_size: int


class MetricsResponse(BaseModel):
    """Gain/loss/effort from the same series as profile and gradient."""
    distance_km: float
    elevation_gain_m: float
    elevation_loss_m: float
    itra_effort_distance: float
    smoothed: bool
    window_size: int
