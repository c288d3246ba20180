"""
Shared test fixtures.

The database and a few slow settings are overridden through environment
variables before anything from `volt` is imported.
"""

import os
import tempfile
import uuid

_TEST_DIR = tempfile.mkdtemp(prefix="volt-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR}/volt-test.db"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ["SYNTHESIS_POLL_INTERVAL_SECONDS"] = "0.05"
os.environ["SYNTHESIS_CORPUS_SCOPE"] = "user"

import pytest  # noqa: E402


def build_gpx_text(points, name="Test track"):
    """GPX 1.1 document with one track segment of (lat, lon, ele) points."""
    trkpts = "\n".join(
        f'      <trkpt lat="{lat}" lon="{lon}"><ele>{ele}</ele></trkpt>'
        for lat, lon, ele in points
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">\n'
        f'  <trk><name>{name}</name><trkseg>\n{trkpts}\n  </trkseg></trk>\n'
        '</gpx>\n'
    )


def line_points(start, end, count, ele_start, ele_end):
    """`count` evenly spaced (lat, lon, ele) points from start to end."""
    (lat0, lon0), (lat1, lon1) = start, end
    return [
        (
            round(lat0 + (lat1 - lat0) * i / (count - 1), 6),
            round(lon0 + (lon1 - lon0) * i / (count - 1), 6),
            round(ele_start + (ele_end - ele_start) * i / (count - 1), 2),
        )
        for i in range(count)
    ]


@pytest.fixture
def gpx_bytes():
    """Factory: (lat, lon, ele) points -> GPX file bytes."""
    def _make(points, name="Test track"):
        return build_gpx_text(points, name).encode("utf-8")
    return _make


@pytest.fixture
def hilly_points():
    """~2.2 km northbound climb from 1000 m to 1200 m with a dip."""
    points = line_points((46.0, 7.0), (46.02, 7.0), 41, 1000, 1200)
    return [
        (lat, lon, ele - (30 if 10 <= i <= 14 else 0))
        for i, (lat, lon, ele) in enumerate(points)
    ]


@pytest.fixture
def client():
    """TestClient with the app lifespan (database + synthesis worker) running."""
    from fastapi.testclient import TestClient
    from volt.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    """Sign up a fresh user and return its Authorization header."""
    suffix = uuid.uuid4().hex[:10]
    response = client.post("/api/v1/auth/signup", json={
        "email": f"runner_{suffix}@example.com",
        "username": f"runner_{suffix}",
        "password": "Trail1234",
    })
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def make_line():
    """Factory for evenly spaced straight-line points (see line_points)."""
    return line_points
