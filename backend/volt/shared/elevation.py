"""
Elevation processing utilities.

This is the SINGLE SOURCE OF TRUTH for elevation calculations.
"""
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.fft import dct, idct

# Plausible elevation range on Earth (metres); readings outside are GPS junk
MIN_VALID_ELEVATION_M = -500.0
MAX_VALID_ELEVATION_M = 9000.0

# Spike detection: a point this far from both neighbours...
SPIKE_THRESHOLD_M = 100.0
# ...while the neighbours agree to within this
SPIKE_NEIGHBOUR_TOLERANCE_M = 50.0


def smooth_elevations(
    elevations: Sequence[float],
    distances_m: Sequence[float],
    window_m: float
) -> List[float]:
    """
    Smooth elevation data with a Gaussian kernel keyed by distance.

    The kernel has the same standard deviation as a box window of
    `window_m` metres (window / sqrt(12)) and is converted to samples
    using the mean point spacing of the route. Filtering is done in the
    DCT-II domain, which is the exact diagonalisation of diffusion with
    reflecting ends: every frequency is multiplied by a factor in (0, 1]
    that shrinks as the window grows, so the mean is kept and the
    variance never increases with a wider window.

    Args:
        elevations: Raw elevation values (m)
        distances_m: Cumulative distance per point (m)
        window_m: Rolling window span (m)

    Returns:
        Smoothed elevation values, same length as input
    """
    n = len(elevations)
    if n < 3 or window_m <= 0:
        return [float(e) for e in elevations]

    spacing_m = distances_m[-1] / (n - 1)
    if spacing_m <= 0:
        return [float(e) for e in elevations]

    sigma = window_m / math.sqrt(12) / spacing_m

    coefficients = dct(np.asarray(elevations, dtype=float), type=2, norm="ortho")
    frequencies = np.arange(n)
    damping = np.exp(-sigma ** 2 * (1.0 - np.cos(np.pi * frequencies / n)))
    smoothed = idct(coefficients * damping, type=2, norm="ortho")

    return smoothed.tolist()


def calculate_elevation_changes(
    elevations: Sequence[float]
) -> Tuple[float, float]:
    """
    Calculate total elevation gain and loss.

    Args:
        elevations: List of elevation values

    Returns:
        Tuple of (gain_m, loss_m)
    """
    gain = 0.0
    loss = 0.0

    for i in range(1, len(elevations)):
        diff = elevations[i] - elevations[i - 1]
        if diff > 0:
            gain += diff
        else:
            loss += abs(diff)

    return gain, loss


def clean_elevations(elevations: Sequence[Optional[float]]) -> List[float]:
    """
    Repair missing and implausible elevation readings.

    - None or out-of-range values are replaced by the mean of valid ones
      (0 when there are none)
    - single-point spikes (> 100 m away from both neighbours that agree
      with each other within 50 m) are flattened to the neighbour mean

    Args:
        elevations: Elevation per point, None where missing

    Returns:
        Cleaned elevation values
    """
    valid = [
        e for e in elevations
        if e is not None and MIN_VALID_ELEVATION_M < e < MAX_VALID_ELEVATION_M
    ]
    if not valid:
        return [0.0] * len(elevations)

    average = sum(valid) / len(valid)
    cleaned = [
        float(e) if e is not None and MIN_VALID_ELEVATION_M < e < MAX_VALID_ELEVATION_M
        else average
        for e in elevations
    ]

    for i in range(1, len(cleaned) - 1):
        prev_ele, curr_ele, next_ele = cleaned[i - 1], cleaned[i], cleaned[i + 1]
        if (
            abs(curr_ele - prev_ele) > SPIKE_THRESHOLD_M
            and abs(curr_ele - next_ele) > SPIKE_THRESHOLD_M
            and abs(next_ele - prev_ele) < SPIKE_NEIGHBOUR_TOLERANCE_M
        ):
            cleaned[i] = (prev_ele + next_ele) / 2

    return cleaned
