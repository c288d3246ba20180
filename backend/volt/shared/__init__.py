"""
Shared utilities (NOT business logic).

Usage:
    from volt.shared import haversine, smooth_elevations
    from volt.shared.gradients import gradient_distribution
"""
from .geo import (
    haversine,
    calculate_gradient_percent,
    cumulative_distances_m,
    calculate_total_distance,
    bounding_box_area_km2,
    EARTH_RADIUS_KM,
    METERS_PER_DEGREE,
)
from .elevation import (
    smooth_elevations,
    calculate_elevation_changes,
    clean_elevations,
)
from .gradients import (
    GRADIENT_BINS,
    GRADIENT_BIN_LABELS,
    GradientBin,
    GradientHistogram,
    GradientSegment,
    classify_gradient,
    build_gradient_segments,
    gradient_distribution,
)
from .effort import (
    itra_effort_distance,
    effort_similarity,
    profile_similarity,
    similarity_score,
)
from .repository import BaseRepository
from .errors import ApiError, register_error_handlers

__all__ = [
    # geo
    "haversine",
    "calculate_gradient_percent",
    "cumulative_distances_m",
    "calculate_total_distance",
    "bounding_box_area_km2",
    "EARTH_RADIUS_KM",
    "METERS_PER_DEGREE",
    # elevation
    "smooth_elevations",
    "calculate_elevation_changes",
    "clean_elevations",
    # gradients
    "GRADIENT_BINS",
    "GRADIENT_BIN_LABELS",
    "GradientBin",
    "GradientHistogram",
    "GradientSegment",
    "classify_gradient",
    "build_gradient_segments",
    "gradient_distribution",
    # effort
    "itra_effort_distance",
    "effort_similarity",
    "profile_similarity",
    "similarity_score",
    # repository
    "BaseRepository",
    # errors
    "ApiError",
    "register_error_handlers",
]
