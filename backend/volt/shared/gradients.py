"""
Gradient classification and distribution.

Single source of truth for the gradient bins shown in the UI.

Bins are by absolute grade in percent with fixed edges
0, 5, 10, 15, 20, 25, 30 and an open-ended 30+ bucket. Ascent and descent
are histogrammed separately, weighted by distance.
"""
from dataclasses import dataclass, field
from typing import List, Sequence

from .geo import calculate_gradient_percent

# (label, lower bound inclusive, upper bound exclusive)
GRADIENT_BINS = [
    ("0-5", 0.0, 5.0),
    ("5-10", 5.0, 10.0),
    ("10-15", 10.0, 15.0),
    ("15-20", 15.0, 20.0),
    ("20-25", 20.0, 25.0),
    ("25-30", 25.0, 30.0),
    ("30+", 30.0, float("inf")),
]

GRADIENT_BIN_LABELS = [label for label, _, _ in GRADIENT_BINS]


@dataclass
class GradientSegment:
    """Stretch of route with a single average grade."""
    start_idx: int
    end_idx: int
    distance_m: float
    elevation_change_m: float
    gradient_percent: float


@dataclass
class GradientBin:
    """One histogram bucket."""
    range: str
    percentage: float
    distance: float  # km


@dataclass
class GradientHistogram:
    """Ascent and descent histograms over the same bin edges."""
    ascent: List[GradientBin] = field(default_factory=list)
    descent: List[GradientBin] = field(default_factory=list)

    def shares(self) -> List[float]:
        """Bin shares (0..1) as one vector: ascent bins then descent bins."""
        return [b.percentage / 100 for b in self.ascent + self.descent]


def classify_gradient(gradient_percent: float) -> str:
    """
    Map a grade to its bin label by absolute value.

    Args:
        gradient_percent: Grade in percent (sign ignored)

    Returns:
        Bin label, e.g. '10-15' or '30+'
    """
    magnitude = abs(gradient_percent)
    for label, lower, upper in GRADIENT_BINS:
        if lower <= magnitude < upper:
            return label
    return GRADIENT_BINS[-1][0]


def build_gradient_segments(
    distances_m: Sequence[float],
    elevations: Sequence[float],
    segment_m: float
) -> List[GradientSegment]:
    """
    Cut a route into consecutive segments of at least `segment_m` metres.

    The trailing stretch shorter than `segment_m` is kept as its own
    segment so that no distance is lost.

    Args:
        distances_m: Cumulative distance per point (m)
        elevations: Elevation per point (m)
        segment_m: Minimum segment length (m)

    Returns:
        Segments in route order
    """
    segments: List[GradientSegment] = []
    start_idx = 0

    for i in range(1, len(distances_m)):
        length = distances_m[i] - distances_m[start_idx]
        if length >= segment_m or i == len(distances_m) - 1:
            if length <= 0:
                continue
            change = elevations[i] - elevations[start_idx]
            segments.append(GradientSegment(
                start_idx=start_idx,
                end_idx=i,
                distance_m=length,
                elevation_change_m=change,
                gradient_percent=calculate_gradient_percent(length, change),
            ))
            start_idx = i

    return segments


def gradient_distribution(segments: Sequence[GradientSegment]) -> GradientHistogram:
    """
    Histogram segments by grade, separately for ascent and descent.

    Percentages are shares of the total ascending (resp. descending)
    distance and sum to 100 on a side that has any distance; a side with
    no distance reports zeros. Flat segments (exactly 0%) count on
    neither side.

    Args:
        segments: Gradient segments

    Returns:
        GradientHistogram with percentages rounded to 2 dp, distances in km
    """
    ascent = {label: 0.0 for label in GRADIENT_BIN_LABELS}
    descent = {label: 0.0 for label in GRADIENT_BIN_LABELS}

    for segment in segments:
        if segment.gradient_percent > 0:
            ascent[classify_gradient(segment.gradient_percent)] += segment.distance_m
        elif segment.gradient_percent < 0:
            descent[classify_gradient(segment.gradient_percent)] += segment.distance_m

    return GradientHistogram(
        ascent=_to_bins(ascent),
        descent=_to_bins(descent),
    )


def _to_bins(distances: dict[str, float]) -> List[GradientBin]:
    total = sum(distances.values())
    return [
        GradientBin(
            range=label,
            percentage=round(distances[label] / total * 100, 2) if total > 0 else 0.0,
            distance=round(distances[label] / 1000, 3),
        )
        for label in GRADIENT_BIN_LABELS
    ]
