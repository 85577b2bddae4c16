# runway_ops/weather/snapshots.py
"""
Weather snapshot persistence.

Snapshots are append-only. The only mutation is flipping is_stale /
stale_since when a fetch fails.
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import insert, select, update
from sqlalchemy.orm import Session

from ..db.schema import weather_snapshot, utcnow
from .models import Observation, WeatherReading, WeatherSnapshot, dump_flags, load_flags


class SnapshotStore:
    """Reads and writes weather_snapshot rows. Does not commit."""

    def __init__(self, session: Session):
        self.session = session

    def add(
        self,
        observation: Observation,
        runway_status_reason: Optional[str],
        raw: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> WeatherSnapshot:
        """Insert a new snapshot and return it."""
        reading = observation.reading
        snapshot_id = str(uuid4())
        timestamp = timestamp or utcnow()

        self.session.execute(
            insert(weather_snapshot).values(
                id=snapshot_id,
                timestamp=timestamp,
                wind_speed=reading.wind_speed,
                wind_direction=reading.wind_direction,
                wind_gust=reading.wind_gust,
                visibility=reading.visibility,
                ceiling=reading.ceiling,
                condition=reading.condition,
                severe_weather=dump_flags(reading.severe_weather),
                temperature=observation.temperature,
                humidity=observation.humidity,
                pressure=observation.pressure,
                cloud_cover=observation.cloud_cover,
                precipitation=observation.precipitation,
                precip_intensity=observation.precip_intensity,
                description=observation.description,
                location_name=observation.location_name,
                runway_status_reason=runway_status_reason,
                is_stale=False,
                stale_since=None,
                raw_json=json.dumps(raw or {}, default=str),
            )
        )

        return WeatherSnapshot(
            id=snapshot_id,
            timestamp=timestamp,
            observation=observation,
            runway_status_reason=runway_status_reason,
            raw=raw or {},
        )

    def latest(self) -> Optional[WeatherSnapshot]:
        """Most recent snapshot by timestamp, or None."""
        row = self.session.execute(
            select(weather_snapshot)
            .order_by(weather_snapshot.c.timestamp.desc())
            .limit(1)
        ).mappings().fetchone()
        return self._row_to_snapshot(row) if row else None

    def mark_latest_stale(self, now: Optional[datetime] = None) -> Optional[WeatherSnapshot]:
        """
        Flag the most recent snapshot stale.

        stale_since is set only the first time, so it records when the data
        started aging. Returns the (possibly already stale) snapshot, or None
        if nothing has ever been recorded.
        """
        snapshot = self.latest()
        if snapshot is None:
            return None
        if snapshot.is_stale and snapshot.stale_since is not None:
            return snapshot

        now = now or utcnow()
        self.session.execute(
            update(weather_snapshot)
            .where(weather_snapshot.c.id == snapshot.id)
            .values(is_stale=True, stale_since=now)
        )
        snapshot.is_stale = True
        snapshot.stale_since = now
        return snapshot

    def _row_to_snapshot(self, row) -> WeatherSnapshot:
        reading = WeatherReading(
            wind_speed=row["wind_speed"],
            wind_direction=row["wind_direction"],
            wind_gust=row["wind_gust"],
            visibility=row["visibility"],
            ceiling=row["ceiling"],
            condition=row["condition"],
            severe_weather=load_flags(row["severe_weather"]),
        )
        observation = Observation(
            reading=reading,
            temperature=row["temperature"],
            humidity=row["humidity"],
            pressure=row["pressure"],
            cloud_cover=row["cloud_cover"],
            precipitation=row["precipitation"] or "None",
            precip_intensity=row["precip_intensity"],
            description=row["description"],
            location_name=row["location_name"],
        )
        raw = json.loads(row["raw_json"]) if row["raw_json"] else {}
        return WeatherSnapshot(
            id=row["id"],
            timestamp=row["timestamp"],
            observation=observation,
            runway_status_reason=row["runway_status_reason"],
            is_stale=bool(row["is_stale"]),
            stale_since=row["stale_since"],
            raw=raw,
        )
