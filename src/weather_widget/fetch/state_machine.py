"""Two-stage geolocation -> forecast fetch state machine."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from urllib.parse import quote, urlencode

from ..exceptions import FetchError, TransportError
from ..redaction import sanitize_for_logging, sanitize_text
from ..weather.decoder import decode_forecast, decode_geolocation
from ..weather.models import Geolocation
from .base import RequestTransport
from .models import (
    CONTEXT_KEY,
    FORECAST_TAG,
    LOCATION_TAG,
    FetchStage,
    WidgetState,
    ensure_utc,
)

HOURLY_FIELDS = ("temperature_2m", "apparent_temperature", "weather_code", "wind_speed_10m")
DAILY_FIELDS = (
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "apparent_temperature_max",
    "apparent_temperature_min",
)
FORECAST_DAYS = 2
DEFAULT_STALL_TIMEOUT = timedelta(seconds=120)
PREVIEW_LIMIT = 300


def build_forecast_url(base_url: str, location: Geolocation) -> str:
    """Build the fixed-shape forecast query; the zone id is fully percent-encoded."""
    query = urlencode(
        {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "hourly": ",".join(HOURLY_FIELDS),
            "daily": ",".join(DAILY_FIELDS),
            "timezone": location.timezone.key,
            "forecast_days": FORECAST_DAYS,
        },
        safe=",",
        quote_via=quote,
    )
    return f"{base_url}?{query}"


def _check_status(status: int, context: str) -> None:
    if not 200 <= status < 300:
        raise TransportError(f"{context} request failed with status {status}", status_code=status)


def payload_preview(body: bytes) -> object:
    """Return a log-safe view of a response body.

    JSON objects have identifying keys masked; anything else is truncated
    and has IP literals masked.
    """
    try:
        decoded = json.loads(body)
    except ValueError:
        decoded = None
    if isinstance(decoded, dict):
        return sanitize_for_logging(decoded)
    return sanitize_text(body[:PREVIEW_LIMIT].decode("utf-8", errors="replace"))


class FetchStateMachine:
    """Drive one location lookup followed by one forecast fetch.

    Responses are correlated by the tag echoed back in the request context.
    A response whose tag does not match the active stage is dropped, which
    also covers late replies to a stage abandoned by stall recovery.
    """

    def __init__(
        self,
        *,
        state: WidgetState,
        transport: RequestTransport,
        location_url: str,
        forecast_url: str,
        logger: logging.Logger,
        stall_timeout: timedelta = DEFAULT_STALL_TIMEOUT,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self.state = state
        self.transport = transport
        self.location_url = location_url
        self.forecast_url = forecast_url
        self.logger = logger
        self.stall_timeout = stall_timeout
        self._now_provider = now_provider or (lambda: datetime.now(UTC))

    @property
    def stage(self) -> FetchStage:
        return self.state.stage

    def trigger(self, now: datetime | None = None) -> bool:
        """Start a refresh cycle; no-op unless idle. Returns True if started."""
        if self.state.stage != "idle":
            self.logger.debug(
                "Refresh requested while %s; ignoring",
                self.state.stage,
                extra={"stage": self.state.stage},
            )
            return False
        self.state.stage = "fetching_location"
        self.state.last_requested = self._now(now)
        self.transport.request(self.location_url, {CONTEXT_KEY: LOCATION_TAG})
        self.logger.info(
            "Requested geolocation from %s",
            self.location_url,
            extra={"stage": self.state.stage, "tag": LOCATION_TAG},
        )
        return True

    def handle_response_event(
        self,
        status: int,
        headers: Mapping[str, str] | None,
        body: bytes,
        context: Mapping[str, str] | None,
    ) -> None:
        """Entry point for the host's response-available event."""
        tag = (context or {}).get(CONTEXT_KEY)
        self.on_response(tag, status, body)

    def on_response(self, tag: str | None, status: int, body: bytes) -> None:
        stage = self.state.stage
        if stage == "fetching_location" and tag == LOCATION_TAG:
            self._complete_location(status, body)
        elif stage == "fetching_forecast" and tag == FORECAST_TAG:
            self._complete_forecast(status, body)
        else:
            self.logger.debug(
                "Ignoring %s response (status %s) while %s",
                tag,
                status,
                stage,
                extra={"stage": stage, "tag": tag},
            )

    def recover_if_stalled(self, now: datetime | None = None) -> bool:
        """Force the machine back to idle when the active stage never completed."""
        if self.state.stage == "idle":
            return False
        requested = self.state.last_requested
        current = self._now(now)
        if requested is not None and current - ensure_utc(requested) < self.stall_timeout:
            return False
        self.logger.warning(
            "No response while %s after %.0fs; returning to idle",
            self.state.stage,
            self.stall_timeout.total_seconds(),
            extra={"stage": self.state.stage},
        )
        self.state.stage = "idle"
        return True

    def _complete_location(self, status: int, body: bytes) -> None:
        try:
            _check_status(status, "Geolocation")
            location = decode_geolocation(body)
        except FetchError as exc:
            self._fail(exc, body)
            return

        url = build_forecast_url(self.forecast_url, location)
        self.state.stage = "fetching_forecast"
        self.state.last_requested = self._now()
        self.transport.request(url, {CONTEXT_KEY: FORECAST_TAG})
        self.logger.info(
            "Requested forecast for timezone %s",
            location.timezone.key,
            extra={"stage": self.state.stage, "tag": FORECAST_TAG},
        )

    def _complete_forecast(self, status: int, body: bytes) -> None:
        try:
            _check_status(status, "Forecast")
            forecast = decode_forecast(body)
        except FetchError as exc:
            self._fail(exc, body)
            return

        self.state.forecast = forecast
        self.state.last_updated = self._now()
        self.state.stage = "idle"
        self.logger.info(
            "Stored forecast: %d hourly rows, %d daily rows (%s)",
            len(forecast.hourly),
            len(forecast.daily),
            forecast.timezone.key,
            extra={"stage": "idle", "tag": FORECAST_TAG},
        )

    def _fail(self, exc: FetchError, body: bytes) -> None:
        stage = self.state.stage
        self.logger.warning(
            "Fetch failed while %s (%s): %s; keeping %s forecast",
            stage,
            type(exc).__name__,
            exc,
            "cached" if self.state.forecast is not None else "no",
            extra={"stage": stage},
        )
        if body:
            self.logger.debug(
                "Rejected %s payload: %s",
                stage,
                json.dumps(payload_preview(body), default=str),
                extra={"stage": stage},
            )
        self.state.stage = "idle"

    def _now(self, value: datetime | None = None) -> datetime:
        return ensure_utc(value if value is not None else self._now_provider())
