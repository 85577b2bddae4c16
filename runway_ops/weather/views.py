# runway_ops/weather/views.py
"""
Role-scoped weather and runway views.

Each role maps to exactly one view level:

    NONE      TRAINEE, FAMILY, ADMIN
    MINIMAL   TECHNICIAN  - condition, temperature, precipitation, critical alerts
    INCIDENT  EMERGENCY   - wind, visibility, temperature, precipitation, alerts
    SUMMARY   COMMANDER   - headline weather plus runway status and stale flag
    FLIGHT    PILOT       - full weather, full runway status, METAR-style text
    FULL      OPS_OFFICER - everything

Wind is presented in knots here; storage stays in m/s.
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..roles import Role
from ..runway.models import RunwayStatusResult
from .formatting import format_metar_style
from .models import WeatherSnapshot, ms_to_knots


class ViewLevel(Enum):
    NONE = "NONE"
    MINIMAL = "MINIMAL"
    INCIDENT = "INCIDENT"
    SUMMARY = "SUMMARY"
    FLIGHT = "FLIGHT"
    FULL = "FULL"


VIEW_LEVELS: Dict[Role, ViewLevel] = {
    Role.TRAINEE: ViewLevel.NONE,
    Role.FAMILY: ViewLevel.NONE,
    Role.ADMIN: ViewLevel.NONE,
    Role.TECHNICIAN: ViewLevel.MINIMAL,
    Role.EMERGENCY: ViewLevel.INCIDENT,
    Role.COMMANDER: ViewLevel.SUMMARY,
    Role.PILOT: ViewLevel.FLIGHT,
    Role.OPS_OFFICER: ViewLevel.FULL,
}

# Flags a technician on the ramp needs to act on
CRITICAL_ALERTS = frozenset(
    {"thunderstorm", "high_wind", "extreme_heat", "extreme_cold", "lightning"}
)


def _knots(value: Optional[float]) -> Optional[float]:
    return round(ms_to_knots(value), 1) if value is not None else None


def _alerts(snapshot: WeatherSnapshot) -> list:
    return list(snapshot.reading.severe_weather)


def _minimal(snapshot: WeatherSnapshot, status: RunwayStatusResult) -> Dict[str, Any]:
    return {
        "condition": snapshot.reading.condition,
        "temperature": snapshot.observation.temperature,
        "precipitation": snapshot.observation.precipitation,
        "alerts": [flag for flag in _alerts(snapshot) if flag in CRITICAL_ALERTS],
    }


def _incident(snapshot: WeatherSnapshot, status: RunwayStatusResult) -> Dict[str, Any]:
    reading = snapshot.reading
    return {
        "wind_speed_kts": _knots(reading.wind_speed),
        "wind_direction": reading.wind_direction,
        "wind_gust_kts": _knots(reading.wind_gust),
        "visibility": reading.visibility,
        "temperature": snapshot.observation.temperature,
        "precipitation": snapshot.observation.precipitation,
        "alerts": _alerts(snapshot),
    }


def _summary(snapshot: WeatherSnapshot, status: RunwayStatusResult) -> Dict[str, Any]:
    return {
        "condition": snapshot.reading.condition,
        "temperature": snapshot.observation.temperature,
        "wind_speed_kts": _knots(snapshot.reading.wind_speed),
        "runway_status": status.status.value,
        "runway_status_reason": status.reason,
        "is_override": status.is_override,
        "alerts": _alerts(snapshot),
        "is_stale": snapshot.is_stale,
    }


def _flight(snapshot: WeatherSnapshot, status: RunwayStatusResult) -> Dict[str, Any]:
    view = snapshot.to_dict()
    view.pop("id", None)
    view["wind_speed_kts"] = _knots(snapshot.reading.wind_speed)
    view["wind_gust_kts"] = _knots(snapshot.reading.wind_gust)
    view["runway_status"] = status.to_dict()
    view["metar"] = format_metar_style(snapshot.observation)
    return view


def _full(snapshot: WeatherSnapshot, status: RunwayStatusResult) -> Dict[str, Any]:
    view = _flight(snapshot, status)
    view["id"] = snapshot.id
    view["raw"] = snapshot.raw
    return view


VIEW_BUILDERS: Dict[ViewLevel, Callable[[WeatherSnapshot, RunwayStatusResult], Dict[str, Any]]] = {
    ViewLevel.MINIMAL: _minimal,
    ViewLevel.INCIDENT: _incident,
    ViewLevel.SUMMARY: _summary,
    ViewLevel.FLIGHT: _flight,
    ViewLevel.FULL: _full,
}


def view_level_for(role: Role) -> ViewLevel:
    return VIEW_LEVELS[role]


def build_weather_view(
    role: Role,
    snapshot: Optional[WeatherSnapshot],
    status: RunwayStatusResult,
) -> Optional[Dict[str, Any]]:
    """
    Current weather as `role` may see it.

    Returns None for roles with no weather access. Without any snapshot
    the view carries only availability and, where the role may see it,
    the runway status.
    """
    level = view_level_for(role)
    if level == ViewLevel.NONE:
        return None

    if snapshot is None:
        view: Dict[str, Any] = {"available": False, "view": level.value}
        if level == ViewLevel.SUMMARY:
            view.update(
                runway_status=status.status.value,
                runway_status_reason=status.reason,
                is_override=status.is_override,
                is_stale=True,
            )
        elif level in (ViewLevel.FLIGHT, ViewLevel.FULL):
            view["runway_status"] = status.to_dict()
        return view

    view = VIEW_BUILDERS[level](snapshot, status)
    view["available"] = True
    view["view"] = level.value
    return view


def build_runway_status_view(role: Role, status: RunwayStatusResult) -> Optional[Dict[str, Any]]:
    """
    Runway status as `role` may see it.

    COMMANDER gets the headline only; PILOT and OPS_OFFICER get factors
    and override details. Other roles get None.
    """
    if role == Role.COMMANDER:
        return {
            "status": status.status.value,
            "reason": status.reason,
            "is_override": status.is_override,
        }
    if role in (Role.PILOT, Role.OPS_OFFICER):
        return status.to_dict()
    return None
