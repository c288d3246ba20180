"""
Track analytics.

Elevation profile, gradient distribution and gain/loss/effort for a point
list at a given (window_size, smoothed) combination. Everything here is a
pure function of the points, so results can be cached by that triple.
"""

from dataclasses import dataclass
from typing import List, Sequence

from volt.features.gpx import TrackPoint
from volt.shared.elevation import calculate_elevation_changes, smooth_elevations
from volt.shared.effort import itra_effort_distance
from volt.shared.geo import cumulative_distances_m
from volt.shared.gradients import (
    GradientHistogram,
    build_gradient_segments,
    gradient_distribution,
)


@dataclass(frozen=True)
class TrackMetrics:
    """Distance, gain/loss and ITRA effort of one elevation series."""
    distance_km: float
    elevation_gain_m: float
    elevation_loss_m: float
    itra_effort_distance: float


@dataclass(frozen=True)
class ElevationSeries:
    """Parallel distance/elevation arrays, smoothed or raw."""
    distances_m: List[float]
    elevations: List[float]
    smoothed: bool
    window_size: int


def compute_metrics(distances_m: Sequence[float], elevations: Sequence[float]) -> TrackMetrics:
    """
    Metrics for one series.

    Rounded to 3 dp (km) and 1 dp (m) so stored and recomputed values compare
    equal.
    """
    distance_km = distances_m[-1] / 1000 if distances_m else 0.0
    gain, loss = calculate_elevation_changes(elevations)
    return TrackMetrics(
        distance_km=round(distance_km, 3),
        elevation_gain_m=round(gain, 1),
        elevation_loss_m=round(loss, 1),
        itra_effort_distance=round(itra_effort_distance(distance_km, gain), 3),
    )


class TrackAnalytics:
    """
    Analytics over an immutable point list.

    Usage:
        analytics = TrackAnalytics(points)
        profile = analytics.series(window_size=100, smoothed=True)
        histogram = analytics.gradient_distribution(100, smoothed=True)
    """

    def __init__(self, points: Sequence[TrackPoint]):
        self.points = list(points)
        self.distances_m = cumulative_distances_m(self.points)
        self.raw_elevations = [p.ele for p in self.points]

    def series(self, window_size: int, smoothed: bool) -> ElevationSeries:
        """Elevation series for the requested window; raw when not smoothed."""
        if smoothed:
            elevations = smooth_elevations(self.raw_elevations, self.distances_m, window_size)
        else:
            elevations = list(self.raw_elevations)
        return ElevationSeries(
            distances_m=self.distances_m,
            elevations=elevations,
            smoothed=smoothed,
            window_size=window_size,
        )

    def raw_metrics(self) -> TrackMetrics:
        """Metrics of the unmodified series (what gets stored)."""
        return compute_metrics(self.distances_m, self.raw_elevations)

    def metrics(self, window_size: int, smoothed: bool) -> TrackMetrics:
        series = self.series(window_size, smoothed)
        return compute_metrics(series.distances_m, series.elevations)

    def gradient_distribution(self, window_size: int, smoothed: bool) -> GradientHistogram:
        """
        Ascent/descent gradient histogram.

        The series is cut into segments of at least `window_size` metres
        before grading, on top of the smoothing when enabled.
        """
        series = self.series(window_size, smoothed)
        segments = build_gradient_segments(series.distances_m, series.elevations, window_size)
        return gradient_distribution(segments)
