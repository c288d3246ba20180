"""
API tests for the track library and analytics endpoints.
"""

import uuid

import gpxpy
import pytest

RACES = "/api/v1/races"


@pytest.fixture
def upload(client, auth_headers, gpx_bytes):
    """Upload points as a GPX file; returns the response."""
    def _upload(points, filename="track.gpx", headers=None, **data):
        return client.post(
            RACES,
            files={"file": (filename, gpx_bytes(points), "application/octet-stream")},
            data=data,
            headers=headers or auth_headers,
        )
    return _upload


@pytest.fixture
def hilly_race(upload, hilly_points):
    response = upload(hilly_points, filename="hilly.gpx")
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# Upload
# =============================================================================

class TestUpload:
    """Tests for POST /races."""

    def test_three_point_metrics(self, upload):
        response = upload([(46.0, 7.0, 100), (46.001, 7.0, 150), (46.002, 7.0, 120)])
        assert response.status_code == 201
        body = response.json()
        assert body["elevation_gain_m"] == pytest.approx(50)
        assert body["elevation_loss_m"] == pytest.approx(30)
        assert body["distance_km"] == pytest.approx(0.222, abs=0.001)
        assert body["itra_effort_distance"] == pytest.approx(body["distance_km"] + 0.5, abs=0.001)
        assert len(body["gpx_data"]["points"]) == 3
        assert body["id"]

    def test_name_from_form_then_gpx(self, upload, hilly_points):
        assert upload(hilly_points, name="Sunday long run").json()["name"] == "Sunday long run"
        assert upload(hilly_points).json()["name"] == "Test track"

    def test_wrong_extension(self, client, auth_headers, gpx_bytes, hilly_points):
        response = client.post(
            RACES,
            files={"file": ("track.txt", gpx_bytes(hilly_points), "text/plain")},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_file_type"

    def test_gpx_content_type_accepted(self, client, auth_headers, gpx_bytes, hilly_points):
        response = client.post(
            RACES,
            files={"file": ("export", gpx_bytes(hilly_points), "application/gpx+xml")},
            headers=auth_headers,
        )
        assert response.status_code == 201

    def test_empty_file(self, client, auth_headers):
        response = client.post(RACES, files={"file": ("empty.gpx", b"", "application/gpx+xml")}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "empty_file"

    def test_invalid_gpx(self, client, auth_headers):
        response = client.post(RACES, files={"file": ("bad.gpx", b"<not-gpx", "application/gpx+xml")}, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["code"] == "invalid_gpx"
        assert response.json()["error"]

    def test_single_point(self, upload):
        response = upload([(46.0, 7.0, 100)])
        assert response.status_code == 422
        assert response.json()["code"] == "insufficient_points"


# =============================================================================
# Library
# =============================================================================

class TestLibrary:
    """Tests for list/get/delete/download."""

    def test_list_newest_first(self, client, auth_headers, upload, hilly_points):
        first = upload(hilly_points, name="first").json()
        second = upload(hilly_points, name="second").json()
        ids = [r["id"] for r in client.get(RACES, headers=auth_headers).json()]
        assert first["id"] in ids and second["id"] in ids
        assert ids.index(second["id"]) < ids.index(first["id"])

    def test_get_includes_smoothed_fields(self, client, auth_headers, hilly_race):
        body = client.get(f"{RACES}/{hilly_race['id']}", headers=auth_headers).json()
        assert body["elevation_gain_m"] == hilly_race["elevation_gain_m"]
        assert body["smoothing_window_size"] == 100
        metrics = client.get(
            f"{RACES}/{hilly_race['id']}/metrics",
            params={"window_size": 100, "smoothed": True},
            headers=auth_headers,
        ).json()
        assert body["smoothed_elevation_gain_m"] == metrics["elevation_gain_m"]
        assert body["smoothed_itra_effort_distance"] == metrics["itra_effort_distance"]

    def test_delete(self, client, auth_headers, hilly_race):
        url = f"{RACES}/{hilly_race['id']}"
        assert client.delete(url, headers=auth_headers).status_code == 204
        assert client.get(url, headers=auth_headers).status_code == 404
        assert hilly_race["id"] not in [r["id"] for r in client.get(RACES, headers=auth_headers).json()]
        assert client.delete(url, headers=auth_headers).status_code == 404

    def test_other_users_track_hidden(self, client, hilly_race):
        suffix = uuid.uuid4().hex[:10]
        other = client.post("/api/v1/auth/signup", json={
            "email": f"other_{suffix}@example.com",
            "username": f"other_{suffix}",
            "password": "Trail1234",
        }).json()
        headers = {"Authorization": f"Bearer {other['token']}"}
        assert client.get(f"{RACES}/{hilly_race['id']}", headers=headers).status_code == 404
        assert client.delete(f"{RACES}/{hilly_race['id']}", headers=headers).status_code == 404

    def test_download(self, client, auth_headers, hilly_race):
        response = client.get(f"{RACES}/{hilly_race['id']}/download", headers=auth_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/gpx+xml")
        assert "attachment" in response.headers["content-disposition"]
        gpx = gpxpy.parse(response.text)
        assert len(gpx.tracks[0].segments[0].points) == len(hilly_race["gpx_data"]["points"])


# =============================================================================
# Analytics
# =============================================================================

class TestAnalytics:
    """Tests for /elevation, /gradient and /metrics."""

    @pytest.mark.parametrize("endpoint", ["elevation", "gradient", "metrics"])
    def test_deterministic(self, client, auth_headers, hilly_race, endpoint):
        url = f"{RACES}/{hilly_race['id']}/{endpoint}"
        params = {"window_size": 150, "smoothed": True}
        first = client.get(url, params=params, headers=auth_headers)
        second = client.get(url, params=params, headers=auth_headers)
        assert first.status_code == 200
        assert first.content == second.content

    def test_unsmoothed_profile_is_raw(self, client, auth_headers, hilly_race):
        body = client.get(
            f"{RACES}/{hilly_race['id']}/elevation",
            params={"smoothed": False},
            headers=auth_headers,
        ).json()
        assert body["smoothed"] is False
        assert body["elevation"] == pytest.approx([p["ele"] for p in hilly_race["gpx_data"]["points"]], abs=0.01)
        assert body["distance"][0] == 0.0
        assert len(body["distance"]) == len(body["elevation"])

    def test_variance_non_increasing(self, client, auth_headers, hilly_race):
        def variance(window):
            values = client.get(
                f"{RACES}/{hilly_race['id']}/elevation",
                params={"window_size": window, "smoothed": True},
                headers=auth_headers,
            ).json()["elevation"]
            mean = sum(values) / len(values)
            return sum((v - mean) ** 2 for v in values) / len(values)

        variances = [variance(w) for w in (10, 100, 300, 1000)]
        for narrower, wider in zip(variances, variances[1:]):
            # elevations are rounded to 2 dp in the response
            assert wider <= narrower + 0.01

    @pytest.mark.parametrize("window", [10, 100, 500, 1000])
    def test_gradient_sums(self, client, auth_headers, hilly_race, window):
        body = client.get(
            f"{RACES}/{hilly_race['id']}/gradient",
            params={"window_size": window, "smoothed": True},
            headers=auth_headers,
        ).json()
        assert [b["range"] for b in body["ascent"]] == ["0-5", "5-10", "10-15", "15-20", "20-25", "25-30", "30+"]
        for side in ("ascent", "descent"):
            total = sum(b["percentage"] for b in body[side])
            assert total == pytest.approx(100, abs=0.1) or total == 0.0

    def test_unsmoothed_metrics_match_upload(self, client, auth_headers, hilly_race):
        body = client.get(
            f"{RACES}/{hilly_race['id']}/metrics",
            params={"smoothed": False},
            headers=auth_headers,
        ).json()
        assert body["elevation_gain_m"] == hilly_race["elevation_gain_m"]
        assert body["elevation_loss_m"] == hilly_race["elevation_loss_m"]
        assert body["itra_effort_distance"] == hilly_race["itra_effort_distance"]

    @pytest.mark.parametrize("window", [5, 1001])
    def test_window_out_of_range(self, client, auth_headers, hilly_race, window):
        response = client.get(
            f"{RACES}/{hilly_race['id']}/elevation",
            params={"window_size": window},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_unknown_track(self, client, auth_headers):
        assert client.get(f"{RACES}/missing/gradient", headers=auth_headers).status_code == 404
