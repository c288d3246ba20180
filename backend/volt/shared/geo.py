"""
Geographic utility functions.

This is the SINGLE SOURCE OF TRUTH for geographic calculations.
DO NOT duplicate these functions elsewhere.

Point sequences are anything indexable as (lat, lon, ...), so plain tuples
and TrackPoint named tuples both work.
"""
import math
from typing import Sequence

# Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Metres per degree of latitude (and of longitude at the equator)
METERS_PER_DEGREE = math.pi * EARTH_RADIUS_KM * 1000 / 180


def haversine(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def calculate_gradient_percent(
    distance_m: float,
    elevation_diff_m: float
) -> float:
    """
    Calculate gradient as percent grade.

    Args:
        distance_m: Horizontal distance in metres
        elevation_diff_m: Elevation difference in metres

    Returns:
        Grade in percent (10.0 = 10%), 0 for non-positive distance
    """
    if distance_m <= 0:
        return 0.0
    return elevation_diff_m / distance_m * 100


def cumulative_distances_m(points: Sequence[Sequence[float]]) -> list[float]:
    """
    Cumulative distance along a route, one entry per point.

    Args:
        points: Sequence of (lat, lon, ...) points

    Returns:
        Distances in metres, starting at 0.0 (empty for no points)
    """
    if not points:
        return []

    distances = [0.0]
    for i in range(1, len(points)):
        prev, curr = points[i - 1], points[i]
        distances.append(
            distances[-1] + haversine(prev[0], prev[1], curr[0], curr[1]) * 1000
        )
    return distances


def calculate_total_distance(points: Sequence[Sequence[float]]) -> float:
    """
    Calculate total distance for a route.

    Args:
        points: Sequence of (lat, lon, ...) points

    Returns:
        Total distance in kilometers
    """
    total = 0.0

    for i in range(1, len(points)):
        prev, curr = points[i - 1], points[i]
        total += haversine(prev[0], prev[1], curr[0], curr[1])

    return total


def bounding_box_area_km2(north: float, south: float, east: float, west: float) -> float:
    """Approximate area of a lat/lon rectangle, width taken at the middle latitude."""
    km_per_degree = METERS_PER_DEGREE / 1000
    height_km = (north - south) * km_per_degree
    width_km = (east - west) * km_per_degree * math.cos(math.radians((north + south) / 2))
    return abs(height_km * width_km)
