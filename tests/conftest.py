# tests/conftest.py
"""
Pytest configuration and fixtures.

DB tests run against an in-memory SQLite database shared across threads
(StaticPool), created fresh for every test. No network access: the weather
source is a fake, and HTTP client tests use httpx.MockTransport.
"""

import os

# Settings are read at import time, so pin them before runway_ops loads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["WEATHER_POLLER_ENABLED"] = "false"
os.environ["LOG_JSON"] = "false"

import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, insert
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from runway_ops.db.engine import init_db
from runway_ops.db.schema import app_user, mission
from runway_ops.errors import FetchError
from runway_ops.ingestion.openweather import Location, RawObservation


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = NOW):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


def build_payload(
    wind_speed: float = 3.0,
    wind_deg: Optional[float] = 270,
    gust: Optional[float] = None,
    visibility: Optional[float] = 10000,
    clouds: Optional[float] = 0,
    condition: str = "Clear",
    description: str = "clear sky",
    temp: float = 15.0,
    humidity: float = 60,
    pressure: float = 1013,
    rain_1h: Optional[float] = None,
    name: str = "Testville",
) -> Dict[str, Any]:
    """OpenWeatherMap-shaped current-weather payload."""
    wind: Dict[str, Any] = {"speed": wind_speed}
    if wind_deg is not None:
        wind["deg"] = wind_deg
    if gust is not None:
        wind["gust"] = gust

    payload: Dict[str, Any] = {
        "name": name,
        "weather": [{"main": condition, "description": description}],
        "main": {"temp": temp, "humidity": humidity, "pressure": pressure},
        "wind": wind,
    }
    if visibility is not None:
        payload["visibility"] = visibility
    if clouds is not None:
        payload["clouds"] = {"all": clouds}
    if rain_1h is not None:
        payload["rain"] = {"1h": rain_1h}
    return payload


class FakeWeatherSource:
    """
    Stand-in for OpenWeatherClient.

    Returns `payload` on each fetch, or raises FetchError while `failing`.
    """

    def __init__(self, payload: Optional[Dict[str, Any]] = None):
        self.payload = payload or build_payload()
        self.failing = False
        self.calls: List[Location] = []

    def fail(self, failing: bool = True) -> None:
        self.failing = failing

    def fetch(self, location: Location) -> RawObservation:
        self.calls.append(location)
        if self.failing:
            raise FetchError("weather provider unreachable")
        return RawObservation(
            location=location,
            payload=self.payload,
            retrieved_at=datetime.now(timezone.utc),
        )


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def session(session_factory) -> Session:
    """Session closed after each test."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def weather_source() -> FakeWeatherSource:
    return FakeWeatherSource()


@pytest.fixture
def payload_factory():
    return build_payload


@pytest.fixture
def seeded_users(session, clock) -> Dict[str, str]:
    """
    Users and missions for alert fan-out.

    pilot-1 has a mission starting in 10 minutes; pilot-2 only has one in
    2 hours and a completed one; ops-off is deactivated.
    """
    users = [
        ("pilot-1", "ppilot", "Pat", "Pilot", "PILOT", True),
        ("pilot-2", "qpilot", "Quinn", "Pilot", "PILOT", True),
        ("ops-1", "oops", "Olive", "Ops", "OPS_OFFICER", True),
        ("cmd-1", "ccommander", "Casey", "Commander", "COMMANDER", True),
        ("tech-1", "ttech", "Toni", "Tech", "TECHNICIAN", True),
        ("ops-off", "zretired", "Ray", "Tired", "OPS_OFFICER", False),
        ("jbond", "jbond", "James", "Bond", "OPS_OFFICER", True),
    ]
    for user_id, username, first, last, role, active in users:
        session.execute(
            insert(app_user).values(
                id=user_id,
                username=username,
                first_name=first,
                last_name=last,
                role=role,
                is_active=active,
            )
        )

    now = clock()
    missions = [
        ("m-1", "pilot-1", "PLANNED", now + timedelta(minutes=10)),
        ("m-2", "pilot-2", "PLANNED", now + timedelta(hours=2)),
        ("m-3", "pilot-2", "COMPLETED", now + timedelta(minutes=5)),
        ("m-4", "pilot-1", "IN_PROGRESS", now + timedelta(minutes=20)),
    ]
    for mission_id, pilot_id, status, start in missions:
        session.execute(
            insert(mission).values(
                id=mission_id,
                pilot_id=pilot_id,
                status=status,
                start_time=start,
                destination_name="Field",
                destination_lat=51.5,
                destination_lon=-0.1,
                priority=1,
            )
        )
    session.commit()
    return {user_id: role for user_id, _, _, _, role, _ in users}


# ============================================================
# AUTO-MARKER FOR DATABASE TESTS
# ============================================================
# Automatically apply @pytest.mark.requires_db to tests that use
# database fixtures, so "pytest -m 'not requires_db'" runs only the
# pure-function tests.

DB_FIXTURES = {"engine", "session_factory", "session", "seeded_users"}


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests that use database fixtures."""
    requires_db_marker = pytest.mark.requires_db

    for item in items:
        if hasattr(item, "fixturenames"):
            if any(fixture in DB_FIXTURES for fixture in item.fixturenames):
                if not any(mark.name == "requires_db" for mark in item.iter_markers()):
                    item.add_marker(requires_db_marker)
