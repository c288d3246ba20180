"""
Tests for gradient classification and the ascent/descent distribution.
"""

import pytest

from volt.shared.gradients import (
    GRADIENT_BIN_LABELS,
    GradientSegment,
    build_gradient_segments,
    classify_gradient,
    gradient_distribution,
)


def _segment(distance_m, gradient_percent):
    return GradientSegment(
        start_idx=0,
        end_idx=1,
        distance_m=distance_m,
        elevation_change_m=distance_m * gradient_percent / 100,
        gradient_percent=gradient_percent,
    )


# =============================================================================
# Test Classification
# =============================================================================

class TestClassifyGradient:
    """Tests for classify_gradient."""

    @pytest.mark.parametrize("grade,label", [
        (0.1, "0-5"),
        (4.99, "0-5"),
        (5.0, "5-10"),
        (12.0, "10-15"),
        (29.9, "25-30"),
        (30.0, "30+"),
        (85.0, "30+"),
    ])
    def test_bins(self, grade, label):
        assert classify_gradient(grade) == label

    def test_sign_ignored(self):
        assert classify_gradient(-17.5) == classify_gradient(17.5) == "15-20"

    def test_labels(self):
        assert GRADIENT_BIN_LABELS == ["0-5", "5-10", "10-15", "15-20", "20-25", "25-30", "30+"]


# =============================================================================
# Test Segmentation
# =============================================================================

class TestBuildGradientSegments:
    """Tests for build_gradient_segments."""

    def test_segments_cover_route(self):
        distances = [i * 30.0 for i in range(11)]  # 300 m
        elevations = [100 + i * 3 for i in range(11)]
        segments = build_gradient_segments(distances, elevations, 100)
        assert sum(s.distance_m for s in segments) == pytest.approx(300)
        assert all(s.gradient_percent == pytest.approx(10) for s in segments)

    def test_minimum_length_except_tail(self):
        distances = [i * 30.0 for i in range(12)]  # 330 m
        elevations = [100.0] * 12
        segments = build_gradient_segments(distances, elevations, 100)
        assert all(s.distance_m >= 100 for s in segments[:-1])
        assert sum(s.distance_m for s in segments) == pytest.approx(330)

    def test_single_point(self):
        assert build_gradient_segments([0.0], [100.0], 100) == []


# =============================================================================
# Test Distribution
# =============================================================================

class TestGradientDistribution:
    """Tests for gradient_distribution."""

    def test_percentages_sum_to_100(self):
        segments = [
            _segment(300, 3), _segment(200, 12), _segment(100, 35),
            _segment(250, -7), _segment(50, -22),
        ]
        histogram = gradient_distribution(segments)
        assert sum(b.percentage for b in histogram.ascent) == pytest.approx(100, abs=0.1)
        assert sum(b.percentage for b in histogram.descent) == pytest.approx(100, abs=0.1)

    def test_bin_values(self):
        histogram = gradient_distribution([_segment(300, 3), _segment(100, 12)])
        ascent = {b.range: b for b in histogram.ascent}
        assert ascent["0-5"].percentage == 75.0
        assert ascent["0-5"].distance == 0.3
        assert ascent["10-15"].percentage == 25.0

    def test_side_without_distance_is_zero(self):
        histogram = gradient_distribution([_segment(100, 8)])
        assert all(b.percentage == 0.0 for b in histogram.descent)
        assert all(b.distance == 0.0 for b in histogram.descent)

    def test_flat_segments_ignored(self):
        histogram = gradient_distribution([_segment(500, 0), _segment(100, 4)])
        ascent = {b.range: b for b in histogram.ascent}
        assert ascent["0-5"].percentage == 100.0
        assert ascent["0-5"].distance == 0.1

    def test_all_bins_present_in_order(self):
        histogram = gradient_distribution([])
        assert [b.range for b in histogram.ascent] == GRADIENT_BIN_LABELS
        assert [b.range for b in histogram.descent] == GRADIENT_BIN_LABELS

    def test_shares_vector(self):
        histogram = gradient_distribution([_segment(100, 8), _segment(100, -8)])
        shares = histogram.shares()
        assert len(shares) == 2 * len(GRADIENT_BIN_LABELS)
        assert sum(shares) == pytest.approx(2.0)
