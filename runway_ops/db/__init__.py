# Database module
from .engine import get_session, session_scope, init_db, SessionLocal
from .schema import metadata
from .system_settings import SystemSettingsStore

__all__ = [
    "get_session",
    "session_scope",
    "init_db",
    "SessionLocal",
    "metadata",
    "SystemSettingsStore",
]
