# runway_ops/api/__init__.py
"""API routes package."""

from .routes_weather import router as weather_router
from .routes_runway import router as runway_router

__all__ = [
    "weather_router",
    "runway_router",
]
