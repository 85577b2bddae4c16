"""Runway operations control core: weather-driven runway status, overrides and alerting."""

__version__ = "0.1.0"
