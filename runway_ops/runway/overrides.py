# runway_ops/runway/overrides.py
"""
Manual runway overrides.

At most one override is active at a time: uncleared and not expired.
setOverride clears every active override before inserting the new one,
and both steps run in one transaction under an advisory lock so two
operators cannot both end up with an active row.
"""

from datetime import datetime
from typing import List, Optional, Union
from uuid import uuid4

from sqlalchemy import and_, insert, or_, select, update
from sqlalchemy.orm import Session

from ..db.engine import acquire_advisory_lock
from ..db.schema import app_user, runway_override, utcnow
from ..errors import ValidationError
from ..governance.audit import AuditAction, AuditLog
from ..logging import get_logger
from ..weather.models import WeatherReading
from . import engine as status_engine
from .models import RunwayOverride, RunwayStatus, RunwayStatusResult

logger = get_logger(__name__)

OVERRIDE_LOCK_KEY = "runway_override"
OVERRIDE_ENTITY = "RunwayOverride"


class OverrideStore:
    """
    Reads and mutates runway_override rows.

    Mutations commit their own transaction; reads do not.
    """

    def __init__(self, session: Session, now=utcnow):
        self.session = session
        self._now = now

    def _active_clause(self, now: datetime):
        return and_(
            runway_override.c.cleared_at.is_(None),
            or_(
                runway_override.c.expires_at.is_(None),
                runway_override.c.expires_at > now,
            ),
        )

    def _select_overrides(self):
        return select(
            runway_override,
            app_user.c.username.label("operator_username"),
            app_user.c.first_name.label("operator_first_name"),
            app_user.c.last_name.label("operator_last_name"),
        ).select_from(
            runway_override.outerjoin(app_user, app_user.c.id == runway_override.c.operator_id)
        )

    def get_active(self) -> Optional[RunwayOverride]:
        """
        Return the active override, or None.

        If more than one row is somehow active, the most recently created wins.
        """
        row = self.session.execute(
            self._select_overrides()
            .where(self._active_clause(self._now()))
            .order_by(runway_override.c.created_at.desc())
            .limit(1)
        ).mappings().fetchone()
        return self._row_to_override(row) if row else None

    def list_active(self) -> List[RunwayOverride]:
        rows = self.session.execute(
            self._select_overrides()
            .where(self._active_clause(self._now()))
            .order_by(runway_override.c.created_at.desc())
        ).mappings()
        return [self._row_to_override(row) for row in rows]

    def set_override(
        self,
        status: Union[RunwayStatus, str],
        reason: str,
        operator_id: str,
        expires_at: Optional[datetime] = None,
    ) -> RunwayOverride:
        """
        Replace any active override with a new one.

        Args:
            status: OPEN, CAUTION or CLOSED
            reason: Free-text justification (required)
            operator_id: User setting the override
            expires_at: Optional automatic expiry

        Returns:
            The new override

        Raises:
            ValidationError: Bad status, blank reason or operator, or expiry in the past
        """
        status = RunwayStatus.parse(status)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Override reason is required")
        if not operator_id:
            raise ValidationError("Override operator is required")

        now = self._now()
        if expires_at is not None:
            if expires_at.tzinfo is None:
                raise ValidationError("expires_at must be timezone-aware")
            if expires_at <= now:
                raise ValidationError("expires_at must be in the future")

        try:
            acquire_advisory_lock(self.session, OVERRIDE_LOCK_KEY)
            self._clear_active(operator_id, now)

            override_id = str(uuid4())
            self.session.execute(
                insert(runway_override).values(
                    id=override_id,
                    status=status.value,
                    reason=reason,
                    operator_id=operator_id,
                    created_at=now,
                    expires_at=expires_at,
                )
            )
            AuditLog(self.session).record(
                actor=operator_id,
                action=AuditAction.RUNWAY_OVERRIDE_SET,
                entity=OVERRIDE_ENTITY,
                entity_id=override_id,
                details={
                    "status": status.value,
                    "reason": reason,
                    "expires_at": expires_at.isoformat() if expires_at else None,
                },
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "runway_override_set",
            override_id=override_id,
            status=status.value,
            operator_id=operator_id,
            reason=reason,
        )
        return RunwayOverride(
            id=override_id,
            status=status,
            reason=reason,
            operator_id=operator_id,
            created_at=now,
            expires_at=expires_at,
        )

    def clear_active(self, cleared_by: str) -> int:
        """
        Clear every active override.

        Returns:
            Number of overrides cleared (0 when none were active)
        """
        try:
            acquire_advisory_lock(self.session, OVERRIDE_LOCK_KEY)
            count = self._clear_active(cleared_by, self._now())
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        if count:
            logger.info("runway_override_cleared", count=count, cleared_by=cleared_by)
        return count

    def _clear_active(self, cleared_by: str, now: datetime) -> int:
        active = self.session.execute(
            select(runway_override.c.id, runway_override.c.status)
            .where(self._active_clause(now))
        ).fetchall()

        audit = AuditLog(self.session)
        for override_id, previous_status in active:
            self.session.execute(
                update(runway_override)
                .where(runway_override.c.id == override_id)
                .values(cleared_at=now, cleared_by=cleared_by)
            )
            audit.record(
                actor=cleared_by,
                action=AuditAction.RUNWAY_OVERRIDE_CLEARED,
                entity=OVERRIDE_ENTITY,
                entity_id=override_id,
                details={"previous_status": previous_status},
            )
        return len(active)

    def get_effective_status(
        self,
        reading: WeatherReading,
        runway_heading: float = status_engine.DEFAULT_RUNWAY_HEADING,
    ) -> RunwayStatusResult:
        """
        Active override if present, otherwise the computed status.

        The reading is not evaluated at all while an override is active.
        """
        override = self.get_active()
        if override is not None:
            return override_result(override)
        return status_engine.evaluate(reading, runway_heading)

    def _row_to_override(self, row) -> RunwayOverride:
        names = [n for n in (row["operator_first_name"], row["operator_last_name"]) if n]
        return RunwayOverride(
            id=row["id"],
            status=RunwayStatus(row["status"]),
            reason=row["reason"],
            operator_id=row["operator_id"],
            created_at=row["created_at"],
            expires_at=row["expires_at"],
            cleared_at=row["cleared_at"],
            cleared_by=row["cleared_by"],
            operator_username=row["operator_username"],
            operator_name=" ".join(names) or None,
        )


def override_result(override: RunwayOverride) -> RunwayStatusResult:
    """Build a status result directly from an override."""
    return RunwayStatusResult(
        status=override.status,
        reason=f"Manual override: {override.reason}",
        factors=[f"Overridden by {override.operator_display_name}"],
        is_override=True,
        override_by=override.operator_username or override.operator_id,
        override_expiry=override.expires_at,
    )
