# runway_ops/weather/poller.py
"""
Weather poller.

One refresh cycle:
1. Resolve location (explicit lat/lon > base location setting > env default > fallback city)
2. Fetch and normalize the observation
3. Effective runway status (active override wins over computed status)
4. Persist snapshot, update runway-status cache, audit any transition
5. Alert on worsening transitions

On fetch failure the latest snapshot is flagged stale, operations staff
are alerted once the data has been stale past the threshold, and the
error is re-raised to the caller.
"""

import threading
from datetime import timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..alerts.dispatcher import AlertDispatcher
from ..alerts.transitions import record_status
from ..db.engine import SessionLocal
from ..db.schema import utcnow
from ..db.system_settings import BASE_LOCATION, WEATHER_STALE_ALERTED_AT, SystemSettingsStore
from ..errors import FetchError, ValidationError
from ..ingestion.openweather import Location, OpenWeatherClient
from ..logging import get_logger
from ..runway.overrides import OverrideStore
from ..runway.service import read_runway_heading
from ..settings import settings
from .models import WeatherSnapshot
from .normalize import normalize_payload
from .snapshots import SnapshotStore

logger = get_logger(__name__)


def resolve_location(
    settings_store: SystemSettingsStore,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
) -> Location:
    """
    Pick the fetch target; the first defined source wins.

    Raises:
        ValidationError: If only one of lat/lon is given, or they are out of range
    """
    if (lat is None) != (lon is None):
        raise ValidationError("lat and lon must be given together")
    try:
        if lat is not None:
            return Location(lat=lat, lon=lon)

        base_location = settings_store.get(BASE_LOCATION)
        if base_location and base_location.strip():
            return Location.parse(base_location)
    except ValueError as e:
        raise ValidationError(str(e))

    if settings.weather_default_lat is not None and settings.weather_default_lon is not None:
        return Location(lat=settings.weather_default_lat, lon=settings.weather_default_lon)
    if settings.weather_default_city:
        return Location(city=settings.weather_default_city)
    return Location(city=settings.weather_fallback_city)


class WeatherPoller:
    """
    Orchestrates fetch -> evaluate -> persist -> alert.

    Args:
        source: Object with fetch(Location) -> RawObservation
        session_factory: Callable returning a new Session
        stale_threshold_minutes: Staleness before the unavailable alert fires
        now: Clock, injectable for tests
    """

    def __init__(
        self,
        source=None,
        session_factory: Callable[[], Session] = SessionLocal,
        stale_threshold_minutes: Optional[int] = None,
        now: Callable = utcnow,
    ):
        self.source = source or OpenWeatherClient()
        self.session_factory = session_factory
        self.stale_threshold = timedelta(
            minutes=(
                stale_threshold_minutes
                if stale_threshold_minutes is not None
                else settings.weather_stale_threshold_minutes
            )
        )
        self._now = now
        self.consecutive_failures = 0
        # Serializes a manual refresh against a scheduled tick in this process
        self._lock = threading.Lock()

    def refresh_weather(
        self,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ) -> WeatherSnapshot:
        """
        Run one refresh cycle.

        Returns:
            The new snapshot

        Raises:
            FetchError: Source unreachable or payload malformed
            ValidationError: Bad coordinates
        """
        with self._lock:
            session = self.session_factory()
            try:
                return self._refresh(session, lat, lon)
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def run_scheduled_tick(self) -> Optional[WeatherSnapshot]:
        """Refresh for the timer; failures are logged, never raised."""
        try:
            return self.refresh_weather()
        except FetchError as e:
            logger.warning(
                "scheduled_refresh_failed",
                error=str(e),
                consecutive_failures=self.consecutive_failures,
            )
        except Exception:
            logger.exception("scheduled_refresh_crashed")
        return None

    def _refresh(
        self,
        session: Session,
        lat: Optional[float],
        lon: Optional[float],
    ) -> WeatherSnapshot:
        settings_store = SystemSettingsStore(session)
        location = resolve_location(settings_store, lat, lon)

        try:
            raw = self.source.fetch(location)
            observation = normalize_payload(raw.payload)
        except FetchError as e:
            self._handle_fetch_failure(session, e, location)
            raise

        self.consecutive_failures = 0
        now = self._now()

        heading = read_runway_heading(settings_store)
        result = OverrideStore(session, now=self._now).get_effective_status(
            observation.reading, heading
        )
        snapshot = SnapshotStore(session).add(
            observation,
            runway_status_reason=result.reason,
            raw=raw.payload,
            timestamp=now,
        )
        transition = record_status(session, result, snapshot.id)
        session.commit()

        logger.info(
            "weather_snapshot_saved",
            snapshot_id=snapshot.id,
            location=location.describe(),
            status=result.status.value,
            reason=result.reason,
            is_override=result.is_override,
        )

        if transition is not None:
            logger.info(
                "runway_status_changed",
                previous=transition.previous.value,
                current=transition.current.value,
                worsening=transition.is_worsening,
            )
            if transition.is_worsening:
                AlertDispatcher(session, now=self._now).dispatch_status_change(
                    transition.previous,
                    transition.current,
                    transition.reason,
                )

        return snapshot

    def _handle_fetch_failure(self, session: Session, error: FetchError, location: Location) -> None:
        self.consecutive_failures += 1
        now = self._now()

        snapshot = SnapshotStore(session).mark_latest_stale(now)
        session.commit()

        logger.warning(
            "weather_fetch_failed",
            error=str(error),
            location=location.describe(),
            consecutive_failures=self.consecutive_failures,
            stale_since=snapshot.stale_since.isoformat() if snapshot else None,
        )

        if snapshot is None or snapshot.stale_since is None:
            return

        stale_for = now - snapshot.stale_since
        if stale_for <= self.stale_threshold:
            return

        # One alert per stale episode, keyed by when the episode started
        settings_store = SystemSettingsStore(session)
        episode = snapshot.stale_since.isoformat()
        if settings_store.get(WEATHER_STALE_ALERTED_AT) == episode:
            return
        settings_store.set(WEATHER_STALE_ALERTED_AT, episode)
        session.commit()

        minutes = int(stale_for.total_seconds() // 60)
        logger.warning("weather_stale_alert", stale_minutes=minutes, stale_since=episode)
        AlertDispatcher(session, now=self._now).dispatch_weather_unavailable(minutes)
