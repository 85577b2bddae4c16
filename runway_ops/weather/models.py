# runway_ops/weather/models.py
"""
Weather models.

Units: wind speeds in meters/second, visibility in meters, ceiling in
feet, temperature in Celsius. Knots appear only at evaluation and
presentation time.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..errors import InvalidReadingError

MS_TO_KNOTS = 1.944


def ms_to_knots(ms: float) -> float:
    """Convert meters/second to knots."""
    return ms * MS_TO_KNOTS


@dataclass(frozen=True)
class WeatherReading:
    """
    Normalized weather input to the runway status engine.

    Wind direction is normalized into [0, 360), so 360 and 0 are the same
    reading. Negative magnitudes and a gust below sustained wind are rejected.
    """
    wind_speed: float                       # m/s
    condition: str = "Clear"
    wind_direction: Optional[float] = None  # degrees true
    wind_gust: Optional[float] = None       # m/s
    visibility: Optional[float] = None      # meters
    ceiling: Optional[float] = None         # feet, estimated
    severe_weather: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.wind_speed is None or self.wind_speed < 0:
            raise InvalidReadingError(f"wind_speed must be >= 0, got {self.wind_speed}")
        for name in ("wind_gust", "visibility", "ceiling"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise InvalidReadingError(f"{name} must be >= 0, got {value}")
        if self.wind_gust is not None and self.wind_gust < self.wind_speed:
            raise InvalidReadingError(
                f"wind_gust ({self.wind_gust}) below wind_speed ({self.wind_speed})"
            )
        if self.wind_direction is not None:
            object.__setattr__(self, "wind_direction", float(self.wind_direction) % 360)
        object.__setattr__(self, "severe_weather", tuple(self.severe_weather or ()))
        object.__setattr__(self, "condition", self.condition or "")


@dataclass(frozen=True)
class Observation:
    """A WeatherReading plus the detail fields persisted alongside it."""
    reading: WeatherReading
    temperature: Optional[float] = None   # Celsius
    humidity: Optional[float] = None      # percent
    pressure: Optional[float] = None      # hPa
    cloud_cover: Optional[float] = None   # percent
    precipitation: str = "None"
    precip_intensity: Optional[float] = None  # mm/h
    description: Optional[str] = None
    location_name: Optional[str] = None


@dataclass
class WeatherSnapshot:
    """Persisted observation, one per successful poll cycle."""
    id: str
    timestamp: datetime
    observation: Observation
    runway_status_reason: Optional[str] = None
    is_stale: bool = False
    stale_since: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def reading(self) -> WeatherReading:
        return self.observation.reading

    def to_dict(self) -> Dict[str, Any]:
        obs = self.observation
        reading = obs.reading
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "wind_speed": reading.wind_speed,
            "wind_direction": reading.wind_direction,
            "wind_gust": reading.wind_gust,
            "visibility": reading.visibility,
            "ceiling": reading.ceiling,
            "condition": reading.condition,
            "severe_weather": list(reading.severe_weather),
            "temperature": obs.temperature,
            "humidity": obs.humidity,
            "pressure": obs.pressure,
            "cloud_cover": obs.cloud_cover,
            "precipitation": obs.precipitation,
            "precip_intensity": obs.precip_intensity,
            "description": obs.description,
            "location_name": obs.location_name,
            "runway_status_reason": self.runway_status_reason,
            "is_stale": self.is_stale,
            "stale_since": self.stale_since.isoformat() if self.stale_since else None,
        }


def dump_flags(flags: Tuple[str, ...]) -> str:
    return json.dumps(list(flags))


def load_flags(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(json.loads(value))
