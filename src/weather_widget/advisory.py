"""Read-only views over the cached forecast for the rendering layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime

from .fetch.models import WidgetState, ensure_utc
from .weather.codes import UmbrellaAdvisory, WeatherCondition, need_umbrella
from .weather.models import ForecastSnapshot


@dataclass(frozen=True, slots=True)
class Advisory:
    """Today's condition, umbrella hint, and temperature range."""

    date: date
    condition: WeatherCondition
    condition_summary: str
    umbrella: UmbrellaAdvisory
    temp_min: float
    temp_max: float
    last_updated: datetime | None = None

    @property
    def temp_range(self) -> tuple[float, float]:
        return self.temp_min, self.temp_max


@dataclass(frozen=True, slots=True)
class HourlyOutlook:
    timestamp: datetime
    condition: WeatherCondition
    umbrella: UmbrellaAdvisory
    temperature: float
    apparent_temperature: float
    wind_speed: float


def _local_now(forecast: ForecastSnapshot, now: datetime | None) -> datetime:
    return ensure_utc(now or datetime.now(UTC)).astimezone(forecast.timezone)


def get_advisory(state: WidgetState, now: datetime | None = None) -> Advisory | None:
    """Summarize today's forecast, or return None when nothing is cached yet.

    "Today" is taken in the forecast's own zone; if that date is not in the
    daily block the first row is used.
    """
    forecast = state.forecast
    if forecast is None or len(forecast.daily) == 0:
        return None

    daily = forecast.daily
    today = _local_now(forecast, now).date()
    index = daily.index_of(today)
    if index is None:
        index = 0
    condition = daily.weather_code[index]
    return Advisory(
        date=daily.dates[index],
        condition=condition,
        condition_summary=condition.label,
        umbrella=need_umbrella(condition),
        temp_min=daily.temp_min[index],
        temp_max=daily.temp_max[index],
        last_updated=state.last_updated,
    )


def upcoming_hours(
    state: WidgetState,
    now: datetime | None = None,
    limit: int = 6,
) -> list[HourlyOutlook]:
    """Return up to ``limit`` hourly rows starting at the current local hour."""
    forecast = state.forecast
    if forecast is None or limit <= 0:
        return []

    hourly = forecast.hourly
    current_hour = _local_now(forecast, now).replace(minute=0, second=0, microsecond=0)
    rows: list[HourlyOutlook] = []
    for i, timestamp in enumerate(hourly.timestamps):
        if timestamp < current_hour:
            continue
        condition = hourly.weather_code[i]
        rows.append(
            HourlyOutlook(
                timestamp=timestamp,
                condition=condition,
                umbrella=need_umbrella(condition),
                temperature=hourly.temperature[i],
                apparent_temperature=hourly.apparent_temperature[i],
                wind_speed=hourly.wind_speed[i],
            )
        )
        if len(rows) >= limit:
            break
    return rows
