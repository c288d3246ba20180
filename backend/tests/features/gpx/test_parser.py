"""
Tests for GPX parsing and point cleaning.
"""

import pytest

from volt.features.gpx import GPXParseError, GPXParserService, TrackPoint, downsample


# =============================================================================
# Test Parsing
# =============================================================================

class TestParse:
    """Tests for GPXParserService.parse."""

    def test_track_points(self, gpx_bytes):
        content = gpx_bytes([(46.0, 7.0, 100), (46.001, 7.0, 150), (46.002, 7.0, 120)], name="Morning loop")
        parsed = GPXParserService.parse(content)
        assert [p.ele for p in parsed.points] == [100, 150, 120]
        assert parsed.name == "Morning loop"

    def test_bom_tolerated(self, gpx_bytes):
        content = b"\xef\xbb\xbf" + gpx_bytes([(46.0, 7.0, 100), (46.001, 7.0, 110)])
        assert len(GPXParserService.parse(content).points) == 2

    def test_route_points_when_no_track(self):
        content = (
            '<?xml version="1.0"?>'
            '<gpx version="1.1" creator="t" xmlns="http://www.topografix.com/GPX/1/1">'
            '<rte><rtept lat="46.0" lon="7.0"><ele>500</ele></rtept>'
            '<rtept lat="46.001" lon="7.0"><ele>510</ele></rtept></rte></gpx>'
        ).encode()
        parsed = GPXParserService.parse(content)
        assert [p.ele for p in parsed.points] == [500, 510]

    def test_waypoints_when_nothing_else(self):
        content = (
            '<?xml version="1.0"?>'
            '<gpx version="1.1" creator="t" xmlns="http://www.topografix.com/GPX/1/1">'
            '<wpt lat="46.0" lon="7.0"><ele>500</ele></wpt>'
            '<wpt lat="46.001" lon="7.0"><ele>505</ele></wpt></gpx>'
        ).encode()
        assert len(GPXParserService.parse(content).points) == 2

    def test_invalid_xml(self):
        with pytest.raises(GPXParseError) as exc:
            GPXParserService.parse(b"this is not xml")
        assert exc.value.code == "invalid_gpx"

    def test_no_points(self):
        content = (
            b'<?xml version="1.0"?>'
            b'<gpx version="1.1" creator="t" xmlns="http://www.topografix.com/GPX/1/1"></gpx>'
        )
        with pytest.raises(GPXParseError) as exc:
            GPXParserService.parse(content)
        assert exc.value.code == "empty_track"

    def test_single_distinct_point(self, gpx_bytes):
        content = gpx_bytes([(46.0, 7.0, 100), (46.0, 7.0, 100), (46.0, 7.0, 101)])
        with pytest.raises(GPXParseError) as exc:
            GPXParserService.parse(content)
        assert exc.value.code == "insufficient_points"

    def test_missing_elevation_filled(self):
        content = (
            '<?xml version="1.0"?>'
            '<gpx version="1.1" creator="t" xmlns="http://www.topografix.com/GPX/1/1"><trk><trkseg>'
            '<trkpt lat="46.0" lon="7.0"><ele>100</ele></trkpt>'
            '<trkpt lat="46.001" lon="7.0"></trkpt>'
            '<trkpt lat="46.002" lon="7.0"><ele>200</ele></trkpt>'
            '</trkseg></trk></gpx>'
        ).encode()
        assert [p.ele for p in GPXParserService.parse(content).points] == pytest.approx([100, 150, 200])


# =============================================================================
# Test Point Optimization
# =============================================================================

class TestOptimizePoints:
    """Tests for GPXParserService.optimize_points."""

    def test_duplicates_dropped(self):
        raw = [(46.0, 7.0, 100, None), (46.0, 7.0, 100, None), (46.001, 7.0, 110, None)]
        assert len(GPXParserService.optimize_points(raw)) == 2

    def test_close_points_thinned_last_kept(self):
        # ~1.1 m apart, last point kept regardless
        raw = [(46.0 + i * 0.00001, 7.0, 100.0, None) for i in range(20)]
        points = GPXParserService.optimize_points(raw)
        assert points[0].lat == raw[0][0]
        assert points[-1].lat == raw[-1][0]
        assert len(points) < len(raw)

    def test_time_carried(self):
        raw = [(46.0, 7.0, 100, "2026-05-01T08:00:00+00:00"), (46.001, 7.0, 110, None)]
        points = GPXParserService.optimize_points(raw)
        assert points[0].time == "2026-05-01T08:00:00+00:00"
        assert points[1].time is None


class TestDownsample:
    """Tests for downsample."""

    def test_exact_count_and_ends(self):
        points = list(range(1001))
        sampled = downsample(points, 100)
        assert len(sampled) == 100
        assert sampled[0] == 0
        assert sampled[-1] == 1000

    def test_short_input_unchanged(self):
        assert downsample([1, 2, 3], 10) == [1, 2, 3]


class TestTrackPoint:
    """Tests for TrackPoint JSON form."""

    def test_round_trip(self):
        point = TrackPoint(lat=46.0, lon=7.0, ele=1234.5)
        assert TrackPoint.from_dict(point.to_dict()) == point

    def test_time_omitted_when_missing(self):
        assert "time" not in TrackPoint(46.0, 7.0, 100.0).to_dict()

    def test_indexable(self):
        lat, lon, ele, time = TrackPoint(46.0, 7.0, 100.0)
        assert (lat, lon, ele, time) == (46.0, 7.0, 100.0, None)
