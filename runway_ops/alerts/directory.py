# runway_ops/alerts/directory.py
"""
Read-only user and mission directory used for alert fan-out.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.schema import app_user, mission, utcnow
from ..roles import Role

ACTIVE_MISSION_STATES = ("PLANNED", "IN_PROGRESS")


@dataclass
class DirectoryUser:
    id: str
    username: str
    role: Role
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        names = [n for n in (self.first_name, self.last_name) if n]
        return " ".join(names) or self.username


class UserDirectory:
    """Queries over app_user and mission."""

    def __init__(self, session: Session, now=utcnow):
        self.session = session
        self._now = now

    def users_by_roles(self, roles: Iterable[Role]) -> List[DirectoryUser]:
        """Active users holding any of `roles`, ordered by username."""
        role_values = [r.value for r in roles]
        rows = self.session.execute(
            select(app_user)
            .where(app_user.c.role.in_(role_values), app_user.c.is_active.is_(True))
            .order_by(app_user.c.username)
        ).mappings()
        return [self._row_to_user(row) for row in rows]

    def pilots_with_upcoming_missions(self, window_minutes: int = 30) -> List[str]:
        """
        Distinct pilot ids with a PLANNED or IN_PROGRESS mission starting
        within the next `window_minutes`.
        """
        now = self._now()
        horizon = now + timedelta(minutes=window_minutes)
        rows = self.session.execute(
            select(mission.c.pilot_id)
            .where(
                mission.c.status.in_(ACTIVE_MISSION_STATES),
                mission.c.start_time >= now,
                mission.c.start_time <= horizon,
            )
            .order_by(mission.c.start_time)
        )
        seen = []
        for (pilot_id,) in rows:
            if pilot_id not in seen:
                seen.append(pilot_id)
        return seen

    def get_user(self, user_id: str) -> Optional[DirectoryUser]:
        row = self.session.execute(
            select(app_user).where(app_user.c.id == user_id)
        ).mappings().fetchone()
        return self._row_to_user(row) if row else None

    def _row_to_user(self, row) -> DirectoryUser:
        return DirectoryUser(
            id=row["id"],
            username=row["username"],
            role=Role(row["role"]),
            first_name=row["first_name"],
            last_name=row["last_name"],
        )
