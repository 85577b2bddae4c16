# runway_ops/api/deps.py
"""
Shared API dependencies.

Caller identity arrives from the fronting gateway in the X-User-Id and
X-User-Role headers; this service trusts them as given.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException

from ..errors import FetchError, NotFoundError, RunwayOpsError, ValidationError
from ..roles import Role, parse_role
from ..weather.poller import WeatherPoller


@dataclass
class Caller:
    user_id: str
    role: Role


def get_caller(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Caller:
    """Resolve the caller, or 401."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Missing caller identity")
    role = parse_role(x_user_role)
    if role is None:
        raise HTTPException(status_code=401, detail=f"Unknown role: {x_user_role}")
    return Caller(user_id=x_user_id, role=role)


def require_roles(*roles: Role):
    """
    Dependency factory: the caller must hold one of `roles`, else 403.

    Usage:
        caller: Caller = Depends(require_roles(Role.OPS_OFFICER))
    """
    allowed = frozenset(roles)

    def dependency(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail=f"Role {caller.role.value} may not perform this action",
            )
        return caller

    return dependency


_poller: Optional[WeatherPoller] = None


def get_poller() -> WeatherPoller:
    """Process-wide poller shared by the scheduler and manual refreshes."""
    global _poller
    if _poller is None:
        _poller = WeatherPoller()
    return _poller


def get_weather_source(poller: WeatherPoller = Depends(get_poller)):
    return poller.source


def http_error(error: RunwayOpsError) -> HTTPException:
    """Map a domain error onto an HTTP error."""
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, FetchError):
        return HTTPException(status_code=502, detail=f"Weather source unavailable: {error}")
    return HTTPException(status_code=500, detail=str(error))
