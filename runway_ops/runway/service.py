# runway_ops/runway/service.py
"""
Runway service.

Read-side facade used by the API and by collaborators:
- latest runway status (override precedence, staleness)
- override set/clear
- runway heading
- ad-hoc weather for arbitrary coordinates (not persisted)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from ..db.schema import utcnow
from ..db.system_settings import RUNWAY_HEADING, SystemSettingsStore
from ..errors import ValidationError
from ..ingestion.openweather import Location, OpenWeatherClient
from ..logging import get_logger
from ..settings import settings
from ..weather.models import Observation, WeatherSnapshot
from ..weather.normalize import normalize_payload
from ..weather.snapshots import SnapshotStore
from . import engine as status_engine
from .models import RunwayOverride, RunwayStatus, RunwayStatusResult
from .overrides import OverrideStore, override_result

logger = get_logger(__name__)

NO_WEATHER_DATA = "No weather data available"


def read_runway_heading(
    settings_store: SystemSettingsStore,
    default: Optional[float] = None,
) -> float:
    """
    Configured runway heading in degrees, normalized into [0, 360).

    Falls back to `default` (settings.runway_default_heading) when unset
    or unparseable.
    """
    fallback = default if default is not None else settings.runway_default_heading
    value = settings_store.get(RUNWAY_HEADING)
    if value is None or not value.strip():
        return fallback
    try:
        return float(value) % 360
    except ValueError:
        logger.warning("invalid_runway_heading", value=value, fallback=fallback)
        return fallback


@dataclass
class LocationWeather:
    """Weather and computed runway status for arbitrary coordinates."""
    lat: float
    lon: float
    observation: Observation
    status: RunwayStatusResult
    fetched_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        obs = self.observation
        reading = obs.reading
        return {
            "lat": self.lat,
            "lon": self.lon,
            "location_name": obs.location_name,
            "condition": reading.condition,
            "description": obs.description,
            "wind_speed": reading.wind_speed,
            "wind_direction": reading.wind_direction,
            "wind_gust": reading.wind_gust,
            "visibility": reading.visibility,
            "ceiling": reading.ceiling,
            "temperature": obs.temperature,
            "precipitation": obs.precipitation,
            "severe_weather": list(reading.severe_weather),
            "runway_status": self.status.to_dict(),
            "fetched_at": self.fetched_at.isoformat(),
        }


class RunwayService:
    """
    Runway operations over one session.

    Usage:
        service = RunwayService(session)
        result = service.get_latest_status()
    """

    def __init__(self, session: Session, source=None, now=utcnow):
        self.session = session
        self._source = source
        self.overrides = OverrideStore(session, now=now)
        self.snapshots = SnapshotStore(session)
        self.settings_store = SystemSettingsStore(session)

    @property
    def source(self):
        if self._source is None:
            self._source = OpenWeatherClient()
        return self._source

    def latest_snapshot(self) -> Optional[WeatherSnapshot]:
        return self.snapshots.latest()

    def get_runway_heading(self) -> float:
        """Runway heading in degrees (270 when unset)."""
        return read_runway_heading(self.settings_store)

    def get_latest_status(self) -> RunwayStatusResult:
        """
        Effective runway status from the latest snapshot.

        An active override wins. Without any snapshot the runway is reported
        CAUTION and stale, since there is nothing to base OPEN on.
        """
        snapshot = self.snapshots.latest()
        override = self.overrides.get_active()

        if override is not None:
            result = override_result(override)
        elif snapshot is not None:
            result = status_engine.evaluate(snapshot.reading, self.get_runway_heading())
        else:
            result = RunwayStatusResult(
                status=RunwayStatus.CAUTION,
                reason=NO_WEATHER_DATA,
                factors=[NO_WEATHER_DATA],
            )

        if snapshot is None:
            result.is_stale = True
        else:
            result.is_stale = snapshot.is_stale
            result.as_of = snapshot.timestamp
        return result

    def set_override(
        self,
        status: Union[RunwayStatus, str],
        reason: str,
        operator_id: str,
        expires_at: Optional[datetime] = None,
    ) -> RunwayOverride:
        """Replace any active override. See OverrideStore.set_override."""
        return self.overrides.set_override(status, reason, operator_id, expires_at)

    def clear_override(self, cleared_by: str) -> int:
        """Clear active overrides; returns how many were cleared (0 is not an error)."""
        return self.overrides.clear_active(cleared_by)

    def get_weather_for_location(self, lat: float, lon: float) -> LocationWeather:
        """
        Fetch, normalize and evaluate weather at arbitrary coordinates.

        Nothing is persisted and no override applies; the result describes
        conditions at the location, not the base runway.

        Raises:
            ValidationError: Coordinates out of range
            FetchError: Source unreachable or payload malformed
        """
        try:
            location = Location(lat=lat, lon=lon)
        except ValueError as e:
            raise ValidationError(str(e))

        raw = self.source.fetch(location)
        observation = normalize_payload(raw.payload)
        status = status_engine.evaluate(observation.reading, self.get_runway_heading())

        logger.debug(
            "location_weather_evaluated",
            location=location.describe(),
            status=status.status.value,
        )
        return LocationWeather(
            lat=lat,
            lon=lon,
            observation=observation,
            status=status,
            fetched_at=raw.retrieved_at,
        )

    def get_system_status(self) -> Dict[str, Any]:
        """Weather feed health: CONNECTED unless the latest snapshot is stale or missing."""
        snapshot = self.snapshots.latest()
        connected = snapshot is not None and not snapshot.is_stale
        return {
            "weather_api": "CONNECTED" if connected else "DISCONNECTED",
            "last_fetch": snapshot.timestamp.isoformat() if snapshot else None,
            "is_stale": snapshot.is_stale if snapshot else True,
            "stale_since": (
                snapshot.stale_since.isoformat() if snapshot and snapshot.stale_since else None
            ),
            "runway_heading": self.get_runway_heading(),
            "active_override": self.overrides.get_active() is not None,
        }
