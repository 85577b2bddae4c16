# runway_ops/runway/models.py
"""
Runway status models.

Status forms a lattice OPEN < CAUTION < CLOSED; combining two statuses
always takes the more restrictive one.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from ..errors import ValidationError


class RunwayStatus(Enum):
    """
    Runway operating status, ordered by restriction.

    OPEN -> CAUTION -> CLOSED
    """
    OPEN = "OPEN"
    CAUTION = "CAUTION"
    CLOSED = "CLOSED"

    @property
    def rank(self) -> int:
        return _RANK[self]

    def escalate(self, other: "RunwayStatus") -> "RunwayStatus":
        """Join: the more restrictive of the two statuses."""
        return self if self.rank >= other.rank else other

    def is_worse_than(self, other: "RunwayStatus") -> bool:
        return self.rank > other.rank

    @classmethod
    def parse(cls, value) -> "RunwayStatus":
        """
        Parse a status from user input.

        Raises:
            ValidationError: If value is not OPEN, CAUTION or CLOSED
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValidationError(
            f"Invalid runway status: {value!r}. Expected one of {[s.value for s in cls]}"
        )


_RANK = {
    RunwayStatus.OPEN: 0,
    RunwayStatus.CAUTION: 1,
    RunwayStatus.CLOSED: 2,
}


ALL_CONDITIONS_NORMAL = "All conditions normal"


@dataclass
class RunwayStatusResult:
    """Derived runway status with its contributing factors."""
    status: RunwayStatus
    reason: str
    factors: List[str] = field(default_factory=list)
    is_override: bool = False
    override_by: Optional[str] = None
    override_expiry: Optional[datetime] = None
    # Populated when derived from a persisted snapshot
    is_stale: bool = False
    as_of: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "reason": self.reason,
            "factors": list(self.factors),
            "is_override": self.is_override,
            "override_by": self.override_by,
            "override_expiry": self.override_expiry.isoformat() if self.override_expiry else None,
            "is_stale": self.is_stale,
            "as_of": self.as_of.isoformat() if self.as_of else None,
        }


@dataclass
class RunwayOverride:
    """A manual override row."""
    id: str
    status: RunwayStatus
    reason: str
    operator_id: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    cleared_at: Optional[datetime] = None
    cleared_by: Optional[str] = None
    # Joined from the user directory
    operator_username: Optional[str] = None
    operator_name: Optional[str] = None

    def is_active(self, at_time: datetime) -> bool:
        """Uncleared and not yet expired at `at_time`."""
        if self.cleared_at is not None:
            return False
        if self.expires_at is not None and self.expires_at <= at_time:
            return False
        return True

    @property
    def operator_display_name(self) -> str:
        return self.operator_name or self.operator_username or self.operator_id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status.value,
            "reason": self.reason,
            "operator_id": self.operator_id,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "cleared_at": self.cleared_at.isoformat() if self.cleared_at else None,
            "cleared_by": self.cleared_by,
        }
