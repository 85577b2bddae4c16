# Ingestion module - external weather source
from .http import HttpClient, HttpClientError, HttpTimeoutError, HttpStatusError
from .openweather import OpenWeatherClient, Location, RawObservation

__all__ = [
    "HttpClient",
    "HttpClientError",
    "HttpTimeoutError",
    "HttpStatusError",
    "OpenWeatherClient",
    "Location",
    "RawObservation",
]
