# runway_ops/alerts/transitions.py
"""
Runway status transition detection.

The previous status is read from the persisted runway-status cache, so
detection gives the same answer across restarts and across instances.
Every change is audited; only worsening changes raise alerts.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..db.system_settings import RUNWAY_STATUS, RUNWAY_STATUS_REASON, SystemSettingsStore
from ..governance.audit import SYSTEM_ACTOR, AuditAction, AuditLog
from ..runway.models import RunwayStatus, RunwayStatusResult


@dataclass
class StatusTransition:
    previous: RunwayStatus
    current: RunwayStatus
    reason: str

    @property
    def is_worsening(self) -> bool:
        return self.current.is_worse_than(self.previous)


def is_worsening(previous: RunwayStatus, current: RunwayStatus) -> bool:
    """OPEN->CAUTION, OPEN->CLOSED and CAUTION->CLOSED are worsening."""
    return current.is_worse_than(previous)


def read_cached_status(settings_store: SystemSettingsStore) -> Optional[RunwayStatus]:
    value = settings_store.get(RUNWAY_STATUS)
    if value is None:
        return None
    try:
        return RunwayStatus(value)
    except ValueError:
        return None


def record_status(
    session: Session,
    result: RunwayStatusResult,
    snapshot_id: Optional[str] = None,
) -> Optional[StatusTransition]:
    """
    Update the runway-status cache and audit any change. Does not commit.

    Returns:
        The transition, or None when the status is unchanged or there was
        no previous status to compare against.
    """
    settings_store = SystemSettingsStore(session)
    previous = read_cached_status(settings_store)

    settings_store.set(RUNWAY_STATUS, result.status.value)
    settings_store.set(RUNWAY_STATUS_REASON, result.reason)

    if previous is None or previous == result.status:
        return None

    transition = StatusTransition(previous=previous, current=result.status, reason=result.reason)
    AuditLog(session).record(
        actor=SYSTEM_ACTOR,
        action=AuditAction.RUNWAY_STATUS_CHANGE,
        entity="Runway",
        entity_id=snapshot_id,
        details={
            "from": previous.value,
            "to": result.status.value,
            "reason": result.reason,
            "is_override": result.is_override,
            "worsening": transition.is_worsening,
        },
    )
    return transition
