"""Weather payload decoding and condition classification."""

from .codes import (
    UmbrellaAdvisory,
    UnknownWeatherCode,
    WeatherCode,
    WeatherCondition,
    classify,
    need_umbrella,
)
from .decoder import decode_forecast, decode_geolocation, resolve_timezone
from .models import DailySeries, ForecastSnapshot, Geolocation, HourlySeries

__all__ = [
    "DailySeries",
    "ForecastSnapshot",
    "Geolocation",
    "HourlySeries",
    "UmbrellaAdvisory",
    "UnknownWeatherCode",
    "WeatherCode",
    "WeatherCondition",
    "classify",
    "decode_forecast",
    "decode_geolocation",
    "need_umbrella",
    "resolve_timezone",
]
