# runway_ops/settings.py
"""
Application settings.
"""

import os
from dataclasses import dataclass
from typing import Optional

# Load .env file
from dotenv import load_dotenv
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass
class Settings:
    """Application configuration."""

    # Database
    database_url: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./var/runway_ops.db"
    )

    # Weather provider (OpenWeatherMap current-conditions API)
    openweather_api_key: str = os.getenv("OPENWEATHER_API_KEY", "")
    openweather_base_url: str = os.getenv(
        "OPENWEATHER_BASE_URL",
        "https://api.openweathermap.org/data/2.5"
    )
    weather_fetch_timeout_seconds: float = float(os.getenv("WEATHER_FETCH_TIMEOUT", "10"))
    weather_fetch_attempts: int = int(os.getenv("WEATHER_FETCH_ATTEMPTS", "1"))

    # Polling
    weather_poll_interval_seconds: int = int(os.getenv("WEATHER_POLL_INTERVAL", "300"))
    weather_poller_enabled: bool = _env_bool("WEATHER_POLLER_ENABLED", "true")
    weather_stale_threshold_minutes: int = int(os.getenv("WEATHER_STALE_THRESHOLD_MINUTES", "60"))

    # Location resolution: explicit args > base location setting > env default > fallback city
    weather_default_lat: Optional[float] = _env_float("WEATHER_DEFAULT_LAT")
    weather_default_lon: Optional[float] = _env_float("WEATHER_DEFAULT_LON")
    weather_default_city: Optional[str] = os.getenv("WEATHER_DEFAULT_CITY") or None
    weather_fallback_city: str = os.getenv("WEATHER_FALLBACK_CITY", "London")

    # Runway
    runway_default_heading: float = float(os.getenv("RUNWAY_DEFAULT_HEADING", "270"))

    # Alerting
    alert_mission_window_minutes: int = int(os.getenv("ALERT_MISSION_WINDOW_MINUTES", "30"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = _env_bool("LOG_JSON", "true")

    # API settings
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    allowed_origins: str = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")


# Global settings instance
settings = Settings()
