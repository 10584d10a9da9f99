"""
Test the coast proximity HTTP API

The engine dependency is overridden with a small in-memory dataset so the
tests never touch the configured asset.
"""
import pytest
from fastapi.testclient import TestClient

from api.app import main as api_main
from coastcheck.engine import CoastProximityEngine
from coastcheck.errors import ConfigurationError

RING = [[2.79, 41.70], [2.80, 41.70], [2.80, 41.71], [2.79, 41.71], [2.79, 41.70]]


@pytest.fixture
def client():
    engine = CoastProximityEngine.from_geojson({"type": "Polygon", "coordinates": [RING]})
    api_main.app.dependency_overrides[api_main.get_engine] = lambda: engine
    yield TestClient(api_main.app)
    api_main.app.dependency_overrides.clear()


class TestCoastProximityAPI:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["ok"] is True

    def test_query(self, client):
        resp = client.get("/api/coast-proximity", params={"lat": 41.7253, "lon": 2.9411})
        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"isNear", "minDistanceMeters", "closestPoint"}
        assert body["closestPoint"] == [2.80, 41.71]
        assert body["isNear"] is False

    def test_query_on_vertex(self, client):
        resp = client.get("/api/coast-proximity", params={"lat": 41.71, "lon": 2.80, "threshold_m": 0})
        assert resp.json() == {"isNear": True, "minDistanceMeters": 0.0, "closestPoint": [2.80, 41.71]}

    def test_invalid_latitude_is_400(self, client):
        resp = client.get("/api/coast-proximity", params={"lat": 200, "lon": 2.79})
        assert resp.status_code == 400

    def test_unknown_mode_is_400(self, client):
        resp = client.get("/api/coast-proximity", params={"lat": 41.7, "lon": 2.79, "mode": "fast"})
        assert resp.status_code == 400

    def test_missing_params_is_422(self, client):
        assert client.get("/api/coast-proximity", params={"lat": 41.7}).status_code == 422

    def test_no_vertices_is_404(self):
        engine = CoastProximityEngine.from_geojson({"type": "Polygon", "coordinates": []})
        api_main.app.dependency_overrides[api_main.get_engine] = lambda: engine
        try:
            resp = TestClient(api_main.app).get("/api/coast-proximity", params={"lat": 41.7, "lon": 2.79})
            assert resp.status_code == 404
        finally:
            api_main.app.dependency_overrides.clear()

    def test_dataset_unavailable_is_503(self, monkeypatch):
        def broken():
            raise ConfigurationError("Coastline dataset not found: /missing.json")

        monkeypatch.setattr(api_main, "get_default_engine", broken)
        resp = TestClient(api_main.app).get("/api/coast-proximity", params={"lat": 41.7, "lon": 2.79})
        assert resp.status_code == 503
        assert "not found" in resp.json()["detail"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
