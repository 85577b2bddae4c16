# runway_ops/governance/audit.py
"""
Append-only audit log.

Entries are written in the caller's transaction and never read back by
the runway core.
"""

import json
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import insert
from sqlalchemy.orm import Session

from ..db.schema import audit_log, utcnow


class AuditAction(Enum):
    """Audit action tags written by the runway core."""
    RUNWAY_OVERRIDE_SET = "RUNWAY_OVERRIDE_SET"
    RUNWAY_OVERRIDE_CLEARED = "RUNWAY_OVERRIDE_CLEARED"
    RUNWAY_STATUS_CHANGE = "RUNWAY_STATUS_CHANGE"


SYSTEM_ACTOR = "SYSTEM"


class AuditLog:
    """Writes audit_log rows. Does not commit."""

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        actor: str,
        action: AuditAction,
        entity: str,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Append one audit entry.

        Args:
            actor: User id, or SYSTEM for automated changes
            action: Action tag
            entity: Entity type name (e.g. "RunwayOverride")
            entity_id: Referenced row id
            details: JSON-serializable detail blob

        Returns:
            Audit entry id
        """
        entry_id = str(uuid4())
        self.session.execute(
            insert(audit_log).values(
                id=entry_id,
                actor=actor,
                action=action.value,
                entity=entity,
                entity_id=entity_id,
                details=json.dumps(details or {}, default=str),
                created_at=utcnow(),
            )
        )
        return entry_id
