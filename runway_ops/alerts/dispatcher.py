# runway_ops/alerts/dispatcher.py
"""
Alert dispatcher - creates notification records for runway alerts.

Every recipient's notification is written and committed on its own, so
one failed write never blocks the rest.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional
from uuid import uuid4

from sqlalchemy import insert
from sqlalchemy.orm import Session

from ..db.schema import notification, utcnow
from ..logging import get_logger
from ..roles import OPERATIONS_ROLES
from ..runway.models import RunwayStatus
from ..settings import settings
from .directory import UserDirectory

logger = get_logger(__name__)


class Severity(Enum):
    """Notification severity tags."""
    INFO = "INFO"
    WARNING = "WARNING"
    EMERGENCY = "EMERGENCY"
    SUCCESS = "SUCCESS"


@dataclass
class DispatchReport:
    """Outcome of one fan-out."""
    title: str
    severity: Severity
    delivered: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def recipient_count(self) -> int:
        return len(self.delivered) + len(self.failed)


class AlertDispatcher:
    """
    Fans runway alerts out to the people who need them.

    Recipients of a worsening transition: pilots with a mission starting
    soon, plus every active OPS_OFFICER and COMMANDER.
    """

    def __init__(
        self,
        session: Session,
        directory: Optional[UserDirectory] = None,
        mission_window_minutes: Optional[int] = None,
        now=utcnow,
    ):
        self.session = session
        self._now = now
        self.directory = directory or UserDirectory(session, now=now)
        self.mission_window_minutes = (
            mission_window_minutes
            if mission_window_minutes is not None
            else settings.alert_mission_window_minutes
        )

    def status_change_recipients(self) -> List[str]:
        """Union of near-term pilots and operations staff, deduplicated."""
        recipients = list(self.directory.pilots_with_upcoming_missions(self.mission_window_minutes))
        for user in self.directory.users_by_roles(OPERATIONS_ROLES):
            if user.id not in recipients:
                recipients.append(user.id)
        return recipients

    def dispatch_status_change(
        self,
        previous: RunwayStatus,
        current: RunwayStatus,
        reason: str,
    ) -> DispatchReport:
        """Notify recipients of a worsening runway status."""
        if current == RunwayStatus.CLOSED:
            title = "RUNWAY CLOSED"
            severity = Severity.EMERGENCY
        else:
            title = "Runway Caution"
            severity = Severity.WARNING
        message = f"Runway status changed from {previous.value} to {current.value}: {reason}"

        return self._fan_out(self.status_change_recipients(), title, message, severity)

    def dispatch_weather_unavailable(self, minutes_stale: int) -> DispatchReport:
        """Notify operations staff that weather data has gone stale."""
        recipients = [user.id for user in self.directory.users_by_roles(OPERATIONS_ROLES)]
        message = (
            f"Weather data has been unavailable for {minutes_stale} minutes. "
            "Runway status is based on the last known observation."
        )
        return self._fan_out(recipients, "Weather data unavailable", message, Severity.WARNING)

    def _fan_out(
        self,
        recipients: Iterable[str],
        title: str,
        message: str,
        severity: Severity,
    ) -> DispatchReport:
        report = DispatchReport(title=title, severity=severity)
        for recipient_id in recipients:
            try:
                self._write_notification(recipient_id, title, message, severity)
                self.session.commit()
                report.delivered.append(recipient_id)
            except Exception:
                self.session.rollback()
                report.failed.append(recipient_id)
                logger.exception("notification_write_failed", recipient_id=recipient_id, title=title)

        logger.info(
            "alert_dispatched",
            title=title,
            severity=severity.value,
            delivered=len(report.delivered),
            failed=len(report.failed),
        )
        return report

    def _write_notification(
        self,
        recipient_id: str,
        title: str,
        message: str,
        severity: Severity,
    ) -> str:
        notification_id = str(uuid4())
        self.session.execute(
            insert(notification).values(
                id=notification_id,
                recipient_id=recipient_id,
                title=title,
                message=message,
                severity=severity.value,
                is_read=False,
                created_at=self._now(),
            )
        )
        return notification_id
