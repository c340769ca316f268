"""Widget fetch state shared by the state machine, scheduler, and renderer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

from ..weather.models import ForecastSnapshot

FetchStage = Literal["idle", "fetching_location", "fetching_forecast"]
RequestTag = Literal["location", "forecast"]

CONTEXT_KEY = "api"
LOCATION_TAG: RequestTag = "location"
FORECAST_TAG: RequestTag = "forecast"


def ensure_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    return value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)


@dataclass(slots=True)
class WidgetState:
    """Per-widget context object, created at host init and dropped at teardown.

    ``forecast`` survives failed refreshes; only a successful forecast
    decode replaces it.
    """

    stage: FetchStage = "idle"
    forecast: ForecastSnapshot | None = None
    last_updated: datetime | None = None
    last_requested: datetime | None = None
    last_rendered: datetime | None = None
