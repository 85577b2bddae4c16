# runway_ops/db/system_settings.py
"""
Key-value system settings store.

Well-known keys used by the runway core are defined as module constants.
"""

from typing import Optional

from sqlalchemy import select, update, insert
from sqlalchemy.orm import Session

from .schema import system_settings, utcnow

BASE_LOCATION = "baseLocation"
RUNWAY_STATUS = "RUNWAY_STATUS"
RUNWAY_STATUS_REASON = "RUNWAY_STATUS_REASON"
RUNWAY_HEADING = "RUNWAY_HEADING"
WEATHER_STALE_ALERTED_AT = "WEATHER_STALE_ALERTED_AT"


class SystemSettingsStore:
    """Read and upsert rows in system_settings. Does not commit."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        row = self.session.execute(
            select(system_settings.c.value).where(system_settings.c.key == key)
        ).fetchone()
        return row[0] if row else default

    def set(self, key: str, value: str, category: str = "operational") -> None:
        """Insert or update a setting."""
        result = self.session.execute(
            update(system_settings)
            .where(system_settings.c.key == key)
            .values(value=value, updated_at=utcnow())
        )
        if result.rowcount == 0:
            self.session.execute(
                insert(system_settings).values(
                    key=key,
                    value=value,
                    category=category,
                    updated_at=utcnow(),
                )
            )

