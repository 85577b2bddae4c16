# runway_ops/runway/engine.py
"""
Runway status engine.

Pure mapping from (WeatherReading, runway heading) to RunwayStatusResult.
Rules run in a fixed order and each one that fires appends a factor:

1. Severe weather flag or condition -> CLOSED, stop
2. Sustained wind                    > 40 kt CLOSED, > 25 kt CAUTION
3. Crosswind component              > 25 kt CLOSED, > 15 kt CAUTION
4. Visibility                       < 1500 m CLOSED, < 5000 m CAUTION
5. Ceiling                          < 500 ft CLOSED, < 1000 ft CAUTION
6. Gust delta over sustained        > 10 % CAUTION
7. Fog / Mist / Haze condition      CAUTION

Statuses are combined with RunwayStatus.escalate, so a later rule can
never lower the result. Boundary values sit on the less restrictive side.
"""

import math
from typing import List, Optional, Tuple

from ..weather.models import WeatherReading, ms_to_knots
from .models import RunwayStatus, RunwayStatusResult, ALL_CONDITIONS_NORMAL

DEFAULT_RUNWAY_HEADING = 270.0

# Aviation thresholds
THRESHOLDS = {
    "wind_kts": {"caution": 25, "closed": 40},
    "crosswind_kts": {"caution": 15, "closed": 25},
    "visibility_m": {"caution": 5000, "closed": 1500},
    "ceiling_ft": {"caution": 1000, "closed": 500},
    "gust_delta_pct": 10,
}

SEVERE_WEATHER = ("Thunderstorm", "Tornado", "Extreme")
REDUCED_VISIBILITY_CONDITIONS = ("Fog", "Mist", "Haze")


def _is_severe(text: str) -> bool:
    lowered = text.lower()
    return any(s.lower() in lowered for s in SEVERE_WEATHER)


def calculate_crosswind(wind_speed: float, wind_direction: float, runway_heading: float) -> float:
    """
    Crosswind component, in the unit of wind_speed.

    crosswind = wind_speed * |sin(|wind_direction - runway_heading|)|
    """
    angle = abs(wind_direction - runway_heading)
    return wind_speed * abs(math.sin(math.radians(angle)))


def _severe_factor(reading: WeatherReading) -> Optional[str]:
    severe_found = [flag for flag in reading.severe_weather if _is_severe(flag)]
    if severe_found:
        return f"Severe weather: {', '.join(severe_found)}"
    if _is_severe(reading.condition):
        return f"Severe condition: {reading.condition}"
    return None


def _wind_rule(wind_kts: float) -> Optional[Tuple[RunwayStatus, str]]:
    limits = THRESHOLDS["wind_kts"]
    if wind_kts > limits["closed"]:
        return RunwayStatus.CLOSED, f"Wind {wind_kts:.0f} kt > {limits['closed']} kt"
    if wind_kts > limits["caution"]:
        return RunwayStatus.CAUTION, f"Wind {wind_kts:.0f} kt (26-40 kt)"
    return None


def _crosswind_knots(reading: WeatherReading, runway_heading: float) -> Optional[float]:
    if reading.wind_direction is None:
        return None
    return ms_to_knots(
        calculate_crosswind(reading.wind_speed, reading.wind_direction, runway_heading)
    )


def _crosswind_rule(crosswind_kts: Optional[float]) -> Optional[Tuple[RunwayStatus, str]]:
    if crosswind_kts is None:
        return None
    limits = THRESHOLDS["crosswind_kts"]
    if crosswind_kts > limits["closed"]:
        return RunwayStatus.CLOSED, f"Crosswind {crosswind_kts:.0f} kt > {limits['closed']} kt"
    if crosswind_kts > limits["caution"]:
        return RunwayStatus.CAUTION, f"Crosswind {crosswind_kts:.0f} kt (16-25 kt)"
    return None


def _visibility_rule(visibility: Optional[float]) -> Optional[Tuple[RunwayStatus, str]]:
    if visibility is None:
        return None
    limits = THRESHOLDS["visibility_m"]
    if visibility < limits["closed"]:
        return RunwayStatus.CLOSED, f"Visibility {visibility:g}m < {limits['closed']}m"
    if visibility < limits["caution"]:
        return RunwayStatus.CAUTION, f"Visibility {visibility:g}m (1500-5000m)"
    return None


def _ceiling_rule(ceiling: Optional[float]) -> Optional[Tuple[RunwayStatus, str]]:
    if ceiling is None:
        return None
    limits = THRESHOLDS["ceiling_ft"]
    if ceiling < limits["closed"]:
        return RunwayStatus.CLOSED, f"Ceiling {ceiling:g} ft < {limits['closed']} ft"
    if ceiling < limits["caution"]:
        return RunwayStatus.CAUTION, f"Ceiling {ceiling:g} ft (500-1000 ft)"
    return None


def _gust_rule(wind_kts: float, gust: Optional[float]) -> Optional[Tuple[RunwayStatus, str]]:
    if gust is None:
        return None
    gust_kts = ms_to_knots(gust)
    if gust_kts <= 0:
        return None
    # Any gust over calm air is unusual enough to flag
    if wind_kts == 0:
        return RunwayStatus.CAUTION, f"Gust {gust_kts:.0f} kt over calm wind"
    gust_delta = (gust_kts - wind_kts) / wind_kts * 100
    if gust_delta > THRESHOLDS["gust_delta_pct"]:
        return RunwayStatus.CAUTION, f"Gust delta {gust_delta:.0f}% > {THRESHOLDS['gust_delta_pct']}%"
    return None


def _condition_rule(condition: str) -> Optional[Tuple[RunwayStatus, str]]:
    if condition in REDUCED_VISIBILITY_CONDITIONS:
        return RunwayStatus.CAUTION, f"Reduced visibility condition: {condition}"
    return None


def evaluate(
    reading: WeatherReading,
    runway_heading: float = DEFAULT_RUNWAY_HEADING,
) -> RunwayStatusResult:
    """
    Compute runway status from a weather reading.

    Args:
        reading: Normalized weather reading
        runway_heading: Runway magnetic heading in degrees

    Returns:
        RunwayStatusResult with factors in rule-evaluation order
    """
    severe = _severe_factor(reading)
    if severe:
        return RunwayStatusResult(
            status=RunwayStatus.CLOSED,
            reason=severe,
            factors=[severe],
        )

    wind_kts = ms_to_knots(reading.wind_speed)
    fired = [
        _wind_rule(wind_kts),
        _crosswind_rule(_crosswind_knots(reading, runway_heading)),
        _visibility_rule(reading.visibility),
        _ceiling_rule(reading.ceiling),
        _gust_rule(wind_kts, reading.wind_gust),
        _condition_rule(reading.condition),
    ]

    status = RunwayStatus.OPEN
    factors: List[str] = []
    for outcome in fired:
        if outcome is None:
            continue
        rule_status, factor = outcome
        status = status.escalate(rule_status)
        factors.append(factor)

    return RunwayStatusResult(
        status=status,
        reason=factors[0] if factors else ALL_CONDITIONS_NORMAL,
        factors=factors,
    )


class RunwayStatusEngine:
    """Object wrapper around evaluate() for callers that inject an engine."""

    def __init__(self, default_heading: float = DEFAULT_RUNWAY_HEADING):
        self.default_heading = default_heading

    def evaluate(
        self,
        reading: WeatherReading,
        runway_heading: Optional[float] = None,
    ) -> RunwayStatusResult:
        heading = self.default_heading if runway_heading is None else runway_heading
        return evaluate(reading, heading)
