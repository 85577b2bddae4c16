# runway_ops/api/routes_runway.py
"""
Runway API routes.

Endpoints for runway status, heading and manual overrides.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db.engine import get_session
from ..errors import RunwayOpsError
from ..logging import get_api_logger
from ..roles import OPERATIONS_ROLES, Role
from ..runway.service import RunwayService
from ..weather.views import build_runway_status_view
from .deps import Caller, http_error, require_roles

router = APIRouter(prefix="/runway", tags=["runway"])
logger = get_api_logger()

STATUS_READERS = (Role.PILOT, Role.OPS_OFFICER, Role.COMMANDER)


class OverrideRequest(BaseModel):
    """Request to set a manual override."""
    status: str
    reason: str
    expires_at: Optional[datetime] = None


class ClearOverrideResponse(BaseModel):
    cleared: int


@router.get("/status")
async def get_runway_status(
    caller: Caller = Depends(require_roles(*STATUS_READERS)),
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    """Effective runway status as the caller's role may see it."""
    result = RunwayService(session).get_latest_status()
    return build_runway_status_view(caller.role, result)


@router.get("/heading")
async def get_runway_heading(
    caller: Caller = Depends(require_roles(*STATUS_READERS)),
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    return {"heading": RunwayService(session).get_runway_heading()}


@router.post("/override")
async def set_override(
    request: OverrideRequest,
    caller: Caller = Depends(require_roles(*OPERATIONS_ROLES)),
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    """
    Replace any active override with a new one.

    The caller becomes the override's operator.
    """
    try:
        override = RunwayService(session).set_override(
            status=request.status,
            reason=request.reason,
            operator_id=caller.user_id,
            expires_at=request.expires_at,
        )
    except RunwayOpsError as e:
        raise http_error(e)

    logger.info("override_set_via_api", user_id=caller.user_id, override_id=override.id)
    return override.to_dict()


@router.delete("/override", response_model=ClearOverrideResponse)
async def clear_override(
    caller: Caller = Depends(require_roles(*OPERATIONS_ROLES)),
    session: Session = Depends(get_session),
) -> ClearOverrideResponse:
    """Clear active overrides. Clearing when none is active returns 0."""
    cleared = RunwayService(session).clear_override(cleared_by=caller.user_id)
    return ClearOverrideResponse(cleared=cleared)
