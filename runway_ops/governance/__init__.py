# Governance module - audit trail
from .audit import AuditLog, AuditAction, SYSTEM_ACTOR

__all__ = [
    "AuditLog",
    "AuditAction",
    "SYSTEM_ACTOR",
]
