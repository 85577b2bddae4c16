# runway_ops/ingestion/openweather.py
"""
OpenWeatherMap current-conditions ingestion.

Source:
- https://api.openweathermap.org/data/2.5/weather?q={city}|lat=..&lon=..&units=metric

Returns the provider payload unmodified; normalization into a
WeatherReading happens in runway_ops.weather.normalize.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from ..errors import FetchError
from ..logging import get_ingestion_logger
from ..settings import settings
from .http import HttpClient

logger = get_ingestion_logger("openweather")


@dataclass(frozen=True)
class Location:
    """A fetch target: either coordinates or a city name."""
    lat: Optional[float] = None
    lon: Optional[float] = None
    city: Optional[str] = None

    def __post_init__(self):
        has_coords = self.lat is not None and self.lon is not None
        if not has_coords and not self.city:
            raise ValueError("Location needs lat/lon or a city name")
        if has_coords and not (-90 <= self.lat <= 90 and -180 <= self.lon <= 180):
            raise ValueError(f"Coordinates out of range: {self.lat}, {self.lon}")

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_params(self) -> Dict[str, Any]:
        if self.has_coordinates:
            return {"lat": self.lat, "lon": self.lon}
        return {"q": self.city}

    def describe(self) -> str:
        if self.has_coordinates:
            return f"{self.lat:.4f},{self.lon:.4f}"
        return self.city

    @classmethod
    def parse(cls, value: str) -> "Location":
        """
        Parse a stored base location: "lat,lon" or a city name.

        Args:
            value: Setting value

        Raises:
            ValueError: A numeric pair outside coordinate range
        """
        value = value.strip()
        parts = [p.strip() for p in value.split(",")]
        if len(parts) == 2:
            try:
                lat, lon = float(parts[0]), float(parts[1])
            except ValueError:
                return cls(city=value)
            # Numeric pairs are coordinates; out-of-range values raise
            return cls(lat=lat, lon=lon)
        return cls(city=value)


@dataclass
class RawObservation:
    """Provider payload plus retrieval metadata."""
    location: Location
    payload: Dict[str, Any]
    retrieved_at: datetime


class OpenWeatherClient:
    """
    Weather source backed by OpenWeatherMap.

    Usage:
        source = OpenWeatherClient(api_key="...")
        raw = source.fetch(Location(city="London"))
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openweather_api_key
        self.client = HttpClient(
            base_url=base_url or settings.openweather_base_url,
            timeout=timeout or settings.weather_fetch_timeout_seconds,
            max_attempts=max_attempts or settings.weather_fetch_attempts,
            transport=transport,
        )

    def fetch(self, location: Location) -> RawObservation:
        """
        Fetch current conditions for a location.

        Raises:
            FetchError: Provider unreachable, timed out, or payload malformed
        """
        params = {**location.to_params(), "appid": self.api_key, "units": "metric"}
        data = self.client.get_json("/weather", params=params)

        if not isinstance(data, dict):
            raise FetchError(f"Unexpected weather payload type: {type(data).__name__}")
        if not isinstance(data.get("wind"), dict) or "speed" not in data["wind"]:
            raise FetchError("Weather payload missing wind speed")
        if not isinstance(data.get("weather"), list) or not data["weather"]:
            raise FetchError("Weather payload missing condition")

        logger.debug("weather_fetched", location=location.describe())
        return RawObservation(
            location=location,
            payload=data,
            retrieved_at=datetime.now(timezone.utc),
        )

