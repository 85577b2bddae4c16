# runway_ops/db/schema.py
"""
Table definitions.

Tables:
- weather_snapshot: append-only observations, one per poll cycle
- runway_override: manual status overrides (cleared_at NULL = candidate active)
- audit_log: append-only audit trail
- notification: per-recipient alert records
- system_settings: key-value settings (base location, runway status cache, heading)
- app_user / mission: read-only directory used for alert fan-out
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps on every backend.

    Values are normalized to UTC on the way in; naive values read back
    (SQLite drops the offset) are tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


metadata = MetaData()


weather_snapshot = Table(
    "weather_snapshot",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("timestamp", UTCDateTime, nullable=False, default=utcnow),
    # Reading (wind in m/s, visibility in meters, ceiling in feet)
    Column("wind_speed", Float, nullable=False),
    Column("wind_direction", Float),
    Column("wind_gust", Float),
    Column("visibility", Float),
    Column("ceiling", Float),
    Column("condition", String(64), nullable=False),
    Column("severe_weather", Text, nullable=False, default="[]"),  # JSON list
    # Observation detail
    Column("temperature", Float),
    Column("humidity", Float),
    Column("pressure", Float),
    Column("cloud_cover", Float),
    Column("precipitation", String(32)),
    Column("precip_intensity", Float),
    Column("description", String(128)),
    Column("location_name", String(128)),
    # Status reason at capture time; status itself is re-derived on read
    Column("runway_status_reason", Text),
    # Staleness
    Column("is_stale", Boolean, nullable=False, default=False),
    Column("stale_since", UTCDateTime),
    Column("raw_json", Text),
    Index("ix_weather_snapshot_timestamp", "timestamp"),
)


runway_override = Table(
    "runway_override",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("status", String(16), nullable=False),
    Column("reason", Text, nullable=False),
    Column("operator_id", String(64), nullable=False),
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
    Column("expires_at", UTCDateTime),
    Column("cleared_at", UTCDateTime),
    Column("cleared_by", String(64)),
    Index("ix_runway_override_active", "cleared_at", "created_at"),
)


audit_log = Table(
    "audit_log",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("actor", String(64), nullable=False),
    Column("action", String(64), nullable=False),
    Column("entity", String(64), nullable=False),
    Column("entity_id", String(64)),
    Column("details", Text),  # JSON blob
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
)


notification = Table(
    "notification",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("recipient_id", String(64), nullable=False),
    Column("title", String(200), nullable=False),
    Column("message", Text, nullable=False),
    Column("severity", String(16), nullable=False),
    Column("is_read", Boolean, nullable=False, default=False),
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
    Index("ix_notification_recipient", "recipient_id", "is_read"),
)


system_settings = Table(
    "system_settings",
    metadata,
    Column("key", String(64), primary_key=True),
    Column("value", Text, nullable=False),
    Column("category", String(32), nullable=False, default="general"),
    Column("updated_at", UTCDateTime, nullable=False, default=utcnow),
)


app_user = Table(
    "app_user",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("username", String(64), nullable=False, unique=True),
    Column("first_name", String(64)),
    Column("last_name", String(64)),
    Column("role", String(32), nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
)


mission = Table(
    "mission",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("pilot_id", String(64), nullable=False),
    Column("status", String(32), nullable=False),
    Column("start_time", UTCDateTime, nullable=False),
    Column("destination_name", String(128)),
    Column("destination_lat", Float),
    Column("destination_lon", Float),
    Column("priority", Integer, nullable=False, default=0),
)
