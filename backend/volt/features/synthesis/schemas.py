"""
Synthesis schemas.

Pydantic models for generate requests, job polling and saving results.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from volt.config import settings
from volt.shared.geo import bounding_box_area_km2
from .models import JobStatus


class BoundingBox(BaseModel):
    """
    Lat/lon rectangle constraining candidate routes.

    Requires north > south and a longitude span strictly between 0 and 360
    degrees (east - west). Area must be within the configured limits.
    """
    north: float = Field(..., ge=-90, le=90)
    south: float = Field(..., ge=-90, le=90)
    east: float = Field(..., ge=-180, le=180)
    west: float = Field(..., ge=-180, le=180)

    @model_validator(mode="after")
    def check_extent(self) -> "BoundingBox":
        if self.north <= self.south:
            raise ValueError("north must be greater than south")
        span = self.east - self.west
        if span <= 0 or span >= 360:
            raise ValueError("east - west must be between 0 and 360 degrees")

        area = bounding_box_area_km2(self.north, self.south, self.east, self.west)
        if area < settings.synthesis_min_bbox_area_km2:
            raise ValueError(
                f"Bounding box too small ({area:.2f} km2, "
                f"min {settings.synthesis_min_bbox_area_km2} km2)"
            )
        if area > settings.synthesis_max_bbox_area_km2:
            raise ValueError(
                f"Bounding box too large ({area:.0f} km2, "
                f"max {settings.synthesis_max_bbox_area_km2:.0f} km2)"
            )
        return self


class BoundsSchema(BaseModel):
    """Stored bounding box, echoed back without re-validation."""
    north: float
    south: float
    east: float
    west: float


class SynthesisRequest(BaseModel):
    """Request for route synthesis."""
    reference_race_id: str
    bounding_box: BoundingBox
    rolling_window: int = Field(100, ge=10, le=1000)
    max_results: int = Field(20, ge=1, le=50)


class RoutePoint(BaseModel):
    lat: float
    lon: float
    ele: float


class RouteSchema(BaseModel):
    points: List[RoutePoint]


class SynthesisResultResponse(BaseModel):
    """Ranked candidate route."""
    id: str
    rank: int
    distance_km: float
    elevation_gain_m: float
    elevation_loss_m: float
    itra_effort_distance: float
    similarity_score: float = Field(..., ge=0, le=1)
    route: RouteSchema


class SynthesisJobResponse(BaseModel):
    """
    Job state as seen by a poller.

    `results` is empty until `status` is complete; complete with an empty
    list means the search ran and found nothing.
    """
    id: str
    status: JobStatus
    reference_race_id: str
    bounding_box: BoundsSchema
    rolling_window: int
    max_results: int
    error: Optional[str] = None
    candidates_considered: Optional[int] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    results: List[SynthesisResultResponse] = []


class SaveResultRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v
