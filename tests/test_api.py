# tests/test_api.py
"""
Test the HTTP surface: identity, role guards and error mapping.

Uses FastAPI's TestClient with the session and poller dependencies
pointed at the in-memory database and the fake weather source. The
lifespan (and so the background poller) is not started.
"""

import pytest
from fastapi.testclient import TestClient

from runway_ops.api.deps import get_poller
from runway_ops.db.engine import get_session
from runway_ops.main import create_app
from runway_ops.weather.poller import WeatherPoller

from conftest import build_payload


def _as(role: str, user_id: str = "user-1") -> dict:
    return {"X-User-Id": user_id, "X-User-Role": role}


@pytest.fixture
def client(session_factory, weather_source, clock):
    app = create_app()
    poller = WeatherPoller(source=weather_source, session_factory=session_factory, now=clock)

    def override_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_poller] = lambda: poller
    return TestClient(app)


class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestIdentity:
    """Tests for caller identity headers."""

    def test_missing_identity(self, client):
        assert client.get("/weather/current").status_code == 401

    def test_unknown_role(self, client):
        assert client.get("/weather/current", headers=_as("PASSENGER")).status_code == 401

    def test_role_is_case_insensitive(self, client):
        assert client.get("/weather/current", headers=_as("technician")).status_code == 200


class TestWeatherRoutes:
    """Tests for /weather endpoints."""

    def test_refresh_requires_operations_role(self, client):
        assert client.post("/weather/refresh", headers=_as("PILOT")).status_code == 403

    def test_refresh(self, client):
        response = client.post("/weather/refresh", headers=_as("OPS_OFFICER"))
        assert response.status_code == 200
        body = response.json()
        assert body["snapshot"]["location_name"] == "Testville"
        assert body["runway_status"]["status"] == "OPEN"

    def test_refresh_with_coordinates(self, client, weather_source):
        response = client.post(
            "/weather/refresh",
            json={"lat": 51.47, "lon": -0.45},
            headers=_as("COMMANDER"),
        )
        assert response.status_code == 200
        assert weather_source.calls[-1].lat == 51.47

    def test_refresh_bad_coordinates(self, client):
        response = client.post("/weather/refresh", json={"lat": 51.47}, headers=_as("COMMANDER"))
        assert response.status_code == 400

    def test_refresh_source_failure(self, client, weather_source):
        weather_source.fail()
        response = client.post("/weather/refresh", headers=_as("OPS_OFFICER"))
        assert response.status_code == 502

    def test_current_view_by_role(self, client):
        client.post("/weather/refresh", headers=_as("OPS_OFFICER"))

        technician = client.get("/weather/current", headers=_as("TECHNICIAN")).json()
        assert technician["view"] == "MINIMAL"
        assert "wind_speed" not in technician

        ops = client.get("/weather/current", headers=_as("OPS_OFFICER")).json()
        assert ops["view"] == "FULL"
        assert "metar" in ops

    def test_current_forbidden_for_trainee(self, client):
        assert client.get("/weather/current", headers=_as("TRAINEE")).status_code == 403

    def test_location_weather(self, client, weather_source):
        weather_source.payload = build_payload(visibility=3000)
        response = client.get("/weather/location?lat=48.35&lon=11.78", headers=_as("PILOT"))
        assert response.status_code == 200
        assert response.json()["runway_status"]["status"] == "CAUTION"

    def test_location_weather_guards(self, client):
        assert client.get("/weather/location?lat=1&lon=1", headers=_as("COMMANDER")).status_code == 403
        assert client.get("/weather/location?lat=95&lon=1", headers=_as("PILOT")).status_code == 422

    def test_system_status_admin_only(self, client):
        assert client.get("/weather/system-status", headers=_as("OPS_OFFICER")).status_code == 403
        response = client.get("/weather/system-status", headers=_as("ADMIN"))
        assert response.status_code == 200
        assert response.json()["weather_api"] == "DISCONNECTED"


class TestRunwayRoutes:
    """Tests for /runway endpoints."""

    def test_status_without_data(self, client):
        body = client.get("/runway/status", headers=_as("PILOT")).json()
        assert body["status"] == "CAUTION"
        assert body["reason"] == "No weather data available"
        assert body["is_stale"] is True

    def test_status_forbidden_for_technician(self, client):
        assert client.get("/runway/status", headers=_as("TECHNICIAN")).status_code == 403

    def test_override_lifecycle(self, client):
        response = client.post(
            "/runway/override",
            json={"status": "CLOSED", "reason": "Runway resurfacing"},
            headers=_as("COMMANDER", "cmd-1"),
        )
        assert response.status_code == 200
        assert response.json()["operator_id"] == "cmd-1"

        pilot_view = client.get("/runway/status", headers=_as("PILOT")).json()
        assert pilot_view["status"] == "CLOSED"
        assert pilot_view["is_override"] is True
        assert pilot_view["factors"] == ["Overridden by cmd-1"]

        commander_view = client.get("/runway/status", headers=_as("COMMANDER")).json()
        assert set(commander_view) == {"status", "reason", "is_override"}

        cleared = client.delete("/runway/override", headers=_as("OPS_OFFICER"))
        assert cleared.json() == {"cleared": 1}
        again = client.delete("/runway/override", headers=_as("OPS_OFFICER"))
        assert again.json() == {"cleared": 0}

    def test_override_validation(self, client):
        bad_status = client.post(
            "/runway/override",
            json={"status": "SHUT", "reason": "x"},
            headers=_as("OPS_OFFICER"),
        )
        assert bad_status.status_code == 400

        blank_reason = client.post(
            "/runway/override",
            json={"status": "CLOSED", "reason": "  "},
            headers=_as("OPS_OFFICER"),
        )
        assert blank_reason.status_code == 400

    def test_override_requires_operations_role(self, client):
        response = client.post(
            "/runway/override",
            json={"status": "CLOSED", "reason": "x"},
            headers=_as("PILOT"),
        )
        assert response.status_code == 403

    def test_heading(self, client):
        assert client.get("/runway/heading", headers=_as("PILOT")).json() == {"heading": 270.0}
