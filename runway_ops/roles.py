# runway_ops/roles.py
"""
User roles of the operations application.

Authorization is enforced by the HTTP layer; the runway core itself is
role-agnostic apart from alert fan-out.
"""

from enum import Enum
from typing import Optional


class Role(Enum):
    PILOT = "PILOT"
    OPS_OFFICER = "OPS_OFFICER"
    COMMANDER = "COMMANDER"
    TECHNICIAN = "TECHNICIAN"
    EMERGENCY = "EMERGENCY"
    TRAINEE = "TRAINEE"
    FAMILY = "FAMILY"
    ADMIN = "ADMIN"


# Operations-facing roles that receive every runway alert
OPERATIONS_ROLES = (Role.OPS_OFFICER, Role.COMMANDER)


def parse_role(value: Optional[str]) -> Optional[Role]:
    try:
        return Role(value.strip().upper())
    except (AttributeError, ValueError):
        return None
