"""Decoded domain structures for geolocation and forecast payloads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from .codes import WeatherCondition


@dataclass(frozen=True, slots=True)
class Geolocation:
    """Where the host appears to be, as reported by the IP lookup service."""

    latitude: float
    longitude: float
    timezone: ZoneInfo


@dataclass(frozen=True, slots=True)
class HourlySeries:
    """Parallel hourly sequences; timestamps are aware in the forecast zone."""

    timestamps: tuple[datetime, ...]
    weather_code: tuple[WeatherCondition, ...]
    temperature: tuple[float, ...]
    apparent_temperature: tuple[float, ...]
    wind_speed: tuple[float, ...]

    def __len__(self) -> int:
        return len(self.timestamps)


@dataclass(frozen=True, slots=True)
class DailySeries:
    """Parallel daily sequences keyed by local date."""

    dates: tuple[date, ...]
    weather_code: tuple[WeatherCondition, ...]
    temp_min: tuple[float, ...]
    temp_max: tuple[float, ...]
    apparent_temp_min: tuple[float, ...]
    apparent_temp_max: tuple[float, ...]

    def __len__(self) -> int:
        return len(self.dates)

    def index_of(self, day: date) -> int | None:
        try:
            return self.dates.index(day)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class ForecastSnapshot:
    """One complete forecast response; replaced wholesale, never edited."""

    timezone: ZoneInfo
    hourly: HourlySeries
    daily: DailySeries
