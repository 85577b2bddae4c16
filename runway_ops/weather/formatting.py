# runway_ops/weather/formatting.py
"""
METAR-style rendering of an observation.

Example: "27015G25KT 3000 -RA BKN020 14 Q1012"
"""

from typing import List, Optional

from .models import Observation, ms_to_knots
from .normalize import CEILING_UNLIMITED_FT

# Condition -> METAR weather code
CONDITION_CODES = {
    "Thunderstorm": "TS",
    "Drizzle": "DZ",
    "Rain": "RA",
    "Snow": "SN",
    "Mist": "BR",
    "Fog": "FG",
    "Haze": "HZ",
    "Smoke": "FU",
    "Dust": "DU",
    "Sand": "SA",
    "Ash": "VA",
    "Squall": "SQ",
    "Tornado": "FC",
}


def _wind_group(observation: Observation) -> str:
    reading = observation.reading
    speed = round(ms_to_knots(reading.wind_speed))
    if reading.wind_direction is None:
        group = f"VRB{speed:02d}"
    else:
        # METAR reports north as 360, never 000
        direction = int(round(reading.wind_direction / 10.0) * 10) % 360 or 360
        group = f"{direction:03d}{speed:02d}"
    if reading.wind_gust is not None:
        group += f"G{round(ms_to_knots(reading.wind_gust)):02d}"
    return group + "KT"


def _visibility_group(visibility: Optional[float]) -> Optional[str]:
    if visibility is None:
        return None
    if visibility >= 10000:
        return "9999"
    return f"{int(visibility):04d}"


def _weather_group(observation: Observation) -> Optional[str]:
    code = CONDITION_CODES.get(observation.reading.condition)
    if code is None:
        return None
    precipitation = observation.precipitation or ""
    if precipitation.startswith("Heavy"):
        return f"+{code}"
    if precipitation.startswith("Light"):
        return f"-{code}"
    return code


def _cloud_group(observation: Observation) -> Optional[str]:
    ceiling = observation.reading.ceiling
    cover = observation.cloud_cover
    if ceiling is None or cover is None:
        return None
    if ceiling >= CEILING_UNLIMITED_FT:
        return "NSC"
    if cover < 25:
        amount = "FEW"
    elif cover < 50:
        amount = "SCT"
    elif cover < 75:
        amount = "BKN"
    else:
        amount = "OVC"
    return f"{amount}{int(ceiling // 100):03d}"


def _temperature_group(temperature: Optional[float]) -> Optional[str]:
    if temperature is None:
        return None
    value = int(round(temperature))
    return f"M{abs(value):02d}" if value < 0 else f"{value:02d}"


def format_metar_style(observation: Observation) -> str:
    """Render an observation as a compact METAR-like line."""
    groups: List[Optional[str]] = [
        _wind_group(observation),
        _visibility_group(observation.reading.visibility),
        _weather_group(observation),
        _cloud_group(observation),
        _temperature_group(observation.temperature),
        f"Q{int(round(observation.pressure)):04d}" if observation.pressure is not None else None,
    ]
    return " ".join(g for g in groups if g)
