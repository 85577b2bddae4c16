# Weather module - readings, normalization, snapshots and polling
from .models import (
    MS_TO_KNOTS,
    ms_to_knots,
    WeatherReading,
    Observation,
    WeatherSnapshot,
)
from .normalize import (
    normalize_payload,
    estimate_ceiling,
    classify_precipitation,
    extract_severe_flags,
)
from .formatting import format_metar_style

__all__ = [
    "MS_TO_KNOTS",
    "ms_to_knots",
    "WeatherReading",
    "Observation",
    "WeatherSnapshot",
    "normalize_payload",
    "estimate_ceiling",
    "classify_precipitation",
    "extract_severe_flags",
    "format_metar_style",
]
