# Alerts module - transition detection and notification fan-out
from .directory import UserDirectory, DirectoryUser
from .dispatcher import AlertDispatcher, DispatchReport, Severity
from .transitions import StatusTransition, is_worsening, record_status

__all__ = [
    "UserDirectory",
    "DirectoryUser",
    "AlertDispatcher",
    "DispatchReport",
    "Severity",
    "StatusTransition",
    "is_worsening",
    "record_status",
]
