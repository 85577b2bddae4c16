# runway_ops/errors.py
"""
Error taxonomy for the runway operations core.

FetchError      - weather provider unreachable or returned malformed data
NotFoundError   - referenced entity is absent
ValidationError - malformed input rejected before any write
"""


class RunwayOpsError(Exception):
    """Base exception for runway operations errors."""
    pass


class FetchError(RunwayOpsError):
    """Raised when the external weather source cannot produce a usable observation."""
    pass


class NotFoundError(RunwayOpsError):
    """Raised when a referenced override, snapshot or user does not exist."""
    pass


class ValidationError(RunwayOpsError):
    """Raised when input is rejected before any write happens."""
    pass


class InvalidReadingError(ValidationError):
    """Raised when a weather reading carries out-of-range values."""
    pass
