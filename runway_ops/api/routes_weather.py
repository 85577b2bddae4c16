# runway_ops/api/routes_weather.py
"""
Weather API routes.

Endpoints for refreshing, reading and inspecting weather data.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db.engine import get_session
from ..errors import RunwayOpsError
from ..logging import get_api_logger
from ..roles import OPERATIONS_ROLES, Role
from ..runway.service import RunwayService
from ..weather.poller import WeatherPoller
from ..weather.views import build_weather_view
from .deps import Caller, get_caller, get_poller, get_weather_source, http_error, require_roles

router = APIRouter(prefix="/weather", tags=["weather"])
logger = get_api_logger()


class RefreshRequest(BaseModel):
    """Optional explicit coordinates for a manual refresh."""
    lat: Optional[float] = None
    lon: Optional[float] = None


class RefreshResponse(BaseModel):
    """Result of a manual refresh."""
    snapshot: Dict[str, Any]
    runway_status: Dict[str, Any]


@router.post("/refresh", response_model=RefreshResponse)
def refresh_weather(
    request: Optional[RefreshRequest] = None,
    caller: Caller = Depends(require_roles(*OPERATIONS_ROLES)),
    poller: WeatherPoller = Depends(get_poller),
    session: Session = Depends(get_session),
) -> RefreshResponse:
    """
    Fetch weather now and recompute runway status.

    Returns 502 when the weather source fails; the latest snapshot is
    marked stale in that case.
    """
    request = request or RefreshRequest()
    try:
        snapshot = poller.refresh_weather(lat=request.lat, lon=request.lon)
        status = RunwayService(session).get_latest_status()
    except RunwayOpsError as e:
        raise http_error(e)

    logger.info("manual_refresh", user_id=caller.user_id, snapshot_id=snapshot.id)
    return RefreshResponse(snapshot=snapshot.to_dict(), runway_status=status.to_dict())


@router.get("/current")
async def get_current_weather(
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    """Latest weather, filtered to what the caller's role may see."""
    service = RunwayService(session)
    view = build_weather_view(caller.role, service.latest_snapshot(), service.get_latest_status())
    if view is None:
        raise HTTPException(status_code=403, detail=f"Role {caller.role.value} has no weather access")
    return view


@router.get("/location")
def get_location_weather(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    caller: Caller = Depends(require_roles(Role.PILOT, Role.OPS_OFFICER)),
    source=Depends(get_weather_source),
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    """Weather and computed runway status at arbitrary coordinates. Not persisted."""
    try:
        result = RunwayService(session, source=source).get_weather_for_location(lat, lon)
    except RunwayOpsError as e:
        raise http_error(e)
    return result.to_dict()


@router.get("/system-status")
async def get_system_status(
    caller: Caller = Depends(require_roles(Role.ADMIN)),
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    """Weather feed health for administrators."""
    return RunwayService(session).get_system_status()
