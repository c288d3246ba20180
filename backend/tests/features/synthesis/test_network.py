"""
Tests for trail network construction.
"""

import pytest

from volt.features.gpx import TrackPoint
from volt.features.synthesis import Bounds, TrailNetwork, clip_to_bounds

BOX = Bounds(north=46.03, south=45.99, east=7.02, west=6.98)


def _track(points):
    return [TrackPoint(lat, lon, ele) for lat, lon, ele in points]


@pytest.fixture
def cross(make_line):
    """North-south and east-west tracks crossing at (46.01, 7.0)."""
    north_south = _track(make_line((46.0, 7.0), (46.02, 7.0), 41, 1000, 1200))
    east_west = _track(make_line((46.01, 6.99), (46.01, 7.01), 41, 1100, 1100))
    return north_south, east_west


class TestClipToBounds:
    """Tests for clip_to_bounds."""

    def test_inside_kept(self):
        points = _track([(46.0, 7.0, 1), (46.01, 7.0, 2)])
        assert clip_to_bounds(points, BOX) == [points]

    def test_split_where_track_leaves(self):
        points = _track([
            (46.0, 7.0, 1), (46.001, 7.0, 1),
            (46.5, 7.0, 1),
            (46.002, 7.0, 1), (46.003, 7.0, 1),
        ])
        pieces = clip_to_bounds(points, BOX)
        assert len(pieces) == 2
        assert all(BOX.contains(p.lat, p.lon) for piece in pieces for p in piece)

    def test_single_point_pieces_dropped(self):
        points = _track([(46.0, 7.0, 1), (46.5, 7.0, 1), (46.001, 7.0, 1)])
        assert clip_to_bounds(points, BOX) == []


class TestTrailNetwork:
    """Tests for TrailNetwork.build."""

    def test_single_track_one_way(self, cross):
        network = TrailNetwork.build([cross[0]], BOX, snap_m=25)
        assert network.way_count == 1
        way = network.ways[0]
        assert way.gain_m == pytest.approx(200)
        assert way.loss_m == pytest.approx(0)
        assert way.length_m == pytest.approx(2224, rel=0.01)

    def test_crossing_makes_junction(self, cross):
        network = TrailNetwork.build(cross, BOX, snap_m=25)
        assert network.way_count == 4
        junction = network.start_nodes(1)[0]
        assert len(network.ways_at(junction)) == 4
        junction_point = network.nodes[junction]
        assert junction_point.lat == pytest.approx(46.01)
        assert junction_point.lon == pytest.approx(7.0)

    def test_order_independent_shape(self, cross):
        forward = TrailNetwork.build(cross, BOX, snap_m=25)
        backward = TrailNetwork.build(list(reversed(cross)), BOX, snap_m=25)
        assert forward.way_count == backward.way_count
        assert sorted(w.length_m for w in forward.ways) == pytest.approx(
            sorted(w.length_m for w in backward.ways)
        )

    def test_points_outside_box_excluded(self, make_line):
        long_track = _track(make_line((45.95, 7.0), (46.05, 7.0), 201, 900, 1300))
        network = TrailNetwork.build([long_track], BOX, snap_m=25)
        assert network.node_count > 0
        assert all(BOX.contains(p.lat, p.lon) for p in network.nodes)

    def test_closed_ring(self):
        ring = _track([
            (46.0, 7.0, 100), (46.001, 7.0, 110), (46.001, 7.001, 120),
            (46.0, 7.001, 110), (46.0, 7.0, 100),
        ])
        network = TrailNetwork.build([ring], BOX, snap_m=25)
        assert network.way_count == 1
        way = network.ways[0]
        assert way.start == way.end
        assert way.gain_m == pytest.approx(20)
        assert way.loss_m == pytest.approx(20)

    def test_points_for_reverse_step(self, cross):
        network = TrailNetwork.build([cross[0]], BOX, snap_m=25)
        forward = network.points_for([(0, True)])
        backward = network.points_for([(0, False)])
        assert backward == list(reversed(forward))

    def test_empty_when_nothing_inside(self, cross):
        far = Bounds(north=10.1, south=10.0, east=10.1, west=10.0)
        network = TrailNetwork.build(cross, far, snap_m=25)
        assert network.way_count == 0
        assert network.start_nodes(10) == []
