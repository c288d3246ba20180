"""
Tests for route search and ranking.
"""

import pytest

from volt.features.gpx import TrackPoint
from volt.features.synthesis import (
    Bounds,
    RouteSearch,
    SearchParams,
    TrailNetwork,
    synthesize,
)
from volt.features.synthesis.search import out_and_back

BOX = Bounds(north=46.03, south=45.99, east=7.02, west=6.98)
PARAMS = SearchParams(
    effort_tolerance=0.2,
    min_similarity=0.0,
    max_start_nodes=40,
    max_expansions=5000,
    max_candidates=500,
)


def _track(points):
    return [TrackPoint(lat, lon, ele) for lat, lon, ele in points]


@pytest.fixture
def reference(make_line):
    return _track(make_line((46.0, 7.0), (46.02, 7.0), 41, 1000, 1200))


@pytest.fixture
def corpus(reference, make_line):
    east_west = _track(make_line((46.01, 6.99), (46.01, 7.01), 41, 1100, 1100))
    return [reference, east_west]


class TestOutAndBack:
    """Tests for out_and_back."""

    def test_out_and_back(self):
        assert out_and_back(((2, True), (5, False))) == ((2, True), (5, False), (5, True), (2, False))


class TestRouteSearch:
    """Tests for RouteSearch."""

    def test_finds_reference_route(self, reference, corpus):
        network = TrailNetwork.build(corpus, BOX, snap_m=25)
        outcome = RouteSearch(network, reference, rolling_window=100, params=PARAMS).run(max_results=20)
        assert outcome.candidates
        best = outcome.candidates[0]
        assert best.similarity_score == 1.0
        assert best.metrics.elevation_gain_m == pytest.approx(200)

    def test_sorted_and_limited(self, reference, corpus):
        network = TrailNetwork.build(corpus, BOX, snap_m=25)
        outcome = RouteSearch(network, reference, rolling_window=100, params=PARAMS).run(max_results=3)
        scores = [c.similarity_score for c in outcome.candidates]
        assert len(scores) <= 3
        assert scores == sorted(scores, reverse=True)
        assert outcome.walks_considered >= len(scores)

    def test_candidates_inside_box(self, reference, corpus):
        outcome = synthesize(reference, corpus, BOX, 100, 50, snap_m=25, params=PARAMS)
        for candidate in outcome.candidates:
            assert all(BOX.contains(p.lat, p.lon) for p in candidate.points)

    def test_effort_within_band(self, reference, corpus):
        network = TrailNetwork.build(corpus, BOX, snap_m=25)
        search = RouteSearch(network, reference, rolling_window=100, params=PARAMS)
        for candidate in search.run(max_results=50).candidates:
            assert search.low - 0.01 <= candidate.metrics.itra_effort_distance <= search.high + 0.01

    def test_no_duplicates(self, reference, corpus):
        outcome = synthesize(reference, corpus, BOX, 100, 50, snap_m=25, params=PARAMS)
        keys = [c.key for c in outcome.candidates]
        assert len(keys) == len(set(keys))

    def test_min_similarity_filters(self, reference, corpus):
        strict = SearchParams(min_similarity=0.999, max_expansions=5000)
        outcome = synthesize(reference, corpus, BOX, 100, 50, snap_m=25, params=strict)
        assert all(c.similarity_score >= 0.999 for c in outcome.candidates)

    def test_deterministic(self, reference, corpus):
        first = synthesize(reference, corpus, BOX, 100, 20, snap_m=25, params=PARAMS)
        second = synthesize(reference, corpus, BOX, 100, 20, snap_m=25, params=PARAMS)
        assert [(c.key, c.similarity_score) for c in first.candidates] == [
            (c.key, c.similarity_score) for c in second.candidates
        ]

    def test_out_and_back_found(self, make_line):
        """A trail half as long as the reference yields its out-and-back."""
        reference = _track(make_line((46.0, 7.0), (46.02, 7.0), 41, 1000, 1000))
        half = _track(make_line((46.0, 7.01), (46.01, 7.01), 21, 1000, 1000))
        outcome = synthesize(reference, [half], BOX, 100, 10, snap_m=25, params=PARAMS)
        assert outcome.candidates
        best = outcome.candidates[0]
        assert best.points[0] == best.points[-1]
        assert best.metrics.distance_km == pytest.approx(2.224, abs=0.01)

    def test_empty_box(self, reference, corpus):
        far = Bounds(north=10.1, south=10.0, east=10.1, west=10.0)
        outcome = synthesize(reference, corpus, far, 100, 20, snap_m=25, params=PARAMS)
        assert outcome.candidates == []
        assert outcome.walks_considered == 0
