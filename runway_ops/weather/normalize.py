# runway_ops/weather/normalize.py
"""
Normalize a provider payload into an Observation.

Derived fields:
- ceiling: estimated from cloud cover, never measured
- precipitation: class from trailing-hour rain/snow, else condition text
- severe_weather: flags from condition/description text, temperature, wind
"""

from typing import Any, Dict, List, Optional

from ..errors import FetchError, InvalidReadingError
from .models import Observation, WeatherReading

# Cloud cover (%) upper bounds -> estimated ceiling (ft)
CEILING_UNLIMITED_FT = 10000
CEILING_BANDS = (
    (25, 5000),
    (50, 3000),
    (75, 2000),
)
CEILING_OVERCAST_FT = 1000

HEAVY_RAIN_MM_H = 7.6
MODERATE_RAIN_MM_H = 2.5
HEAVY_SNOW_MM_H = 4.0

SEVERE_TEXT_FLAGS = ("thunderstorm", "tornado", "fog", "mist", "smoke", "haze")
EXTREME_COLD_C = -20
EXTREME_HEAT_C = 45
HIGH_WIND_MS = 20


def estimate_ceiling(cloud_cover: Optional[float]) -> Optional[float]:
    """
    Estimate ceiling in feet from cloud cover percentage.

    Returns None when cloud data is absent.
    """
    if cloud_cover is None:
        return None
    if cloud_cover <= 0:
        return CEILING_UNLIMITED_FT
    for upper, ceiling in CEILING_BANDS:
        if cloud_cover < upper:
            return ceiling
    return CEILING_OVERCAST_FT


def classify_precipitation(
    condition: str,
    rain_1h: Optional[float] = None,
    snow_1h: Optional[float] = None,
) -> str:
    """
    Classify precipitation.

    Measured trailing-hour intensity wins over condition text.
    """
    if rain_1h is not None:
        if rain_1h > HEAVY_RAIN_MM_H:
            return "Heavy Rain"
        if rain_1h > MODERATE_RAIN_MM_H:
            return "Moderate Rain"
        return "Light Rain"
    if snow_1h is not None:
        return "Heavy Snow" if snow_1h > HEAVY_SNOW_MM_H else "Light Snow"

    lowered = (condition or "").lower()
    if "drizzle" in lowered:
        return "Drizzle"
    if "rain" in lowered:
        return "Rain"
    if "snow" in lowered:
        return "Snow"
    return "None"


def extract_severe_flags(
    condition: str,
    description: Optional[str] = None,
    temperature: Optional[float] = None,
    wind_speed: Optional[float] = None,
) -> List[str]:
    """Severe-weather flags in a stable order."""
    text = f"{condition or ''} {description or ''}".lower()
    flags = [flag for flag in SEVERE_TEXT_FLAGS if flag in text]

    if temperature is not None:
        if temperature < EXTREME_COLD_C:
            flags.append("extreme_cold")
        elif temperature > EXTREME_HEAT_C:
            flags.append("extreme_heat")

    if wind_speed is not None and wind_speed > HIGH_WIND_MS:
        flags.append("high_wind")

    return flags


def _number(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_payload(payload: Dict[str, Any]) -> Observation:
    """
    Build an Observation from an OpenWeatherMap current-weather payload.

    Raises:
        FetchError: If required fields are missing or out of range
    """
    try:
        wind = payload.get("wind") or {}
        main = payload.get("main") or {}
        conditions = payload.get("weather") or [{}]
        if not isinstance(conditions, list):
            raise FetchError("Weather payload condition is not a list")
        weather = conditions[0]
        clouds = payload.get("clouds") or {}
        rain = payload.get("rain") or {}
        snow = payload.get("snow") or {}

        wind_speed = _number(wind.get("speed"))
        if wind_speed is None:
            raise FetchError("Weather payload missing wind speed")

        condition = weather.get("main") or "Unknown"
        description = weather.get("description")
        temperature = _number(main.get("temp"))
        cloud_cover = _number(clouds.get("all"))
        rain_1h = _number(rain.get("1h"))
        snow_1h = _number(snow.get("1h"))

        gust = _number(wind.get("gust"))
        if gust is not None and gust < wind_speed:
            gust = None

        reading = WeatherReading(
            wind_speed=wind_speed,
            wind_direction=_number(wind.get("deg")),
            wind_gust=gust,
            visibility=_number(payload.get("visibility")),
            ceiling=estimate_ceiling(cloud_cover),
            condition=condition,
            severe_weather=tuple(
                extract_severe_flags(condition, description, temperature, wind_speed)
            ),
        )
    except InvalidReadingError as e:
        raise FetchError(f"Weather payload out of range: {e}")
    except (AttributeError, IndexError, KeyError, TypeError) as e:
        raise FetchError(f"Malformed weather payload: {e}")

    return Observation(
        reading=reading,
        temperature=temperature,
        humidity=_number(main.get("humidity")),
        pressure=_number(main.get("pressure")),
        cloud_cover=cloud_cover,
        precipitation=classify_precipitation(condition, rain_1h, snow_1h),
        precip_intensity=rain_1h if rain_1h is not None else snow_1h,
        description=description,
        location_name=payload.get("name"),
    )
