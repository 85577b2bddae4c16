# Runway module - status engine, overrides and service facade
from .models import (
    RunwayStatus,
    RunwayStatusResult,
    RunwayOverride,
    ALL_CONDITIONS_NORMAL,
)
from .engine import RunwayStatusEngine, evaluate, calculate_crosswind, THRESHOLDS

__all__ = [
    "RunwayStatus",
    "RunwayStatusResult",
    "RunwayOverride",
    "ALL_CONDITIONS_NORMAL",
    "RunwayStatusEngine",
    "evaluate",
    "calculate_crosswind",
    "THRESHOLDS",
]
