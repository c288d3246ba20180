"""
Effort formulas.

ITRA-style effort distance and the similarity scores built on it.
"""
import math
from typing import Sequence

# Metres of climbing counted as one kilometre of flat distance
CLIMB_METERS_PER_EFFORT_KM = 100.0

# Decay rate for relative effort difference (diff 0.2 -> score ~0.37)
EFFORT_SIMILARITY_DECAY = 5.0

# Blend of the two similarity components (sums to 1)
EFFORT_WEIGHT = 0.75
PROFILE_WEIGHT = 0.25


def itra_effort_distance(distance_km: float, elevation_gain_m: float) -> float:
    """
    ITRA effort distance: 1 km per kilometre run plus 1 km per 100 m climbed.

    Strictly increasing in both distance and gain.
    """
    return distance_km + elevation_gain_m / CLIMB_METERS_PER_EFFORT_KM


def effort_similarity(reference_effort: float, candidate_effort: float) -> float:
    """
    Similarity of two effort distances in [0, 1].

    exp(-5 * |ref - cand| / ref); 1.0 for identical efforts, decaying with
    the relative difference.
    """
    if reference_effort <= 0:
        return 1.0 if candidate_effort <= 0 else 0.0
    diff = abs(reference_effort - candidate_effort) / reference_effort
    return math.exp(-diff * EFFORT_SIMILARITY_DECAY)


def profile_similarity(reference_shares: Sequence[float], candidate_shares: Sequence[float]) -> float:
    """
    Similarity of two gradient distributions in [0, 1].

    Inputs are bin shares as produced by GradientHistogram.shares()
    (ascent bins then descent bins, each side summing to 1 or 0).
    Returns 1 minus half the mean per-side L1 distance.
    """
    if len(reference_shares) != len(candidate_shares):
        raise ValueError("Gradient distributions have different bin counts")
    l1 = sum(abs(a - b) for a, b in zip(reference_shares, candidate_shares))
    # Each side contributes at most 2 to the L1 distance
    sides = 2
    return max(0.0, 1.0 - l1 / (2 * sides))


def similarity_score(
    reference_effort: float,
    candidate_effort: float,
    reference_shares: Sequence[float],
    candidate_shares: Sequence[float],
) -> float:
    """Weighted blend of effort and gradient-profile similarity, rounded to 4 dp."""
    score = (
        EFFORT_WEIGHT * effort_similarity(reference_effort, candidate_effort)
        + PROFILE_WEIGHT * profile_similarity(reference_shares, candidate_shares)
    )
    return round(min(1.0, max(0.0, score)), 4)
