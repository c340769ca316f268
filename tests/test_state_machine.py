"""Tests for the location -> forecast fetch state machine."""

from __future__ import annotations

import dataclasses
import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pytest

from weather_widget.fetch.base import RequestTransport
from weather_widget.fetch.models import WidgetState
from weather_widget.fetch.state_machine import (
    FetchStateMachine,
    build_forecast_url,
    payload_preview,
)
from weather_widget.redaction import REDACTED
from weather_widget.weather.decoder import decode_geolocation

FIXTURE_PATH = Path(__file__).parent / "fixtures" / "open_meteo_forecast.json"
LOCATION_URL = "http://ip-api.test/json/"
FORECAST_URL = "https://forecast.test/v1/forecast"
GEO_BODY = b'{"status":"success","lat":35.694,"lon":139.754,"timezone":"Asia/Tokyo"}'
T0 = datetime(2026, 2, 24, 9, 15, tzinfo=UTC)


class RecordingTransport(RequestTransport):
    def __init__(self) -> None:
        self.requests: list[tuple[str, dict[str, str]]] = []

    def request(self, url: str, context: dict[str, str]) -> None:
        self.requests.append((url, context))


class Clock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


def _make_machine(
    state: WidgetState | None = None,
) -> tuple[FetchStateMachine, RecordingTransport, Clock]:
    transport = RecordingTransport()
    clock = Clock(T0)
    machine = FetchStateMachine(
        state=state or WidgetState(),
        transport=transport,
        location_url=LOCATION_URL,
        forecast_url=FORECAST_URL,
        logger=logging.getLogger("test_state_machine"),
        stall_timeout=timedelta(seconds=120),
        now_provider=clock,
    )
    return machine, transport, clock


def _run_full_cycle(machine: FetchStateMachine) -> None:
    machine.trigger()
    machine.on_response("location", 200, GEO_BODY)
    machine.on_response("forecast", 200, FIXTURE_PATH.read_bytes())


def test_trigger_requests_location_from_idle() -> None:
    machine, transport, _ = _make_machine()
    assert machine.trigger() is True
    assert machine.stage == "fetching_location"
    assert machine.state.last_requested == T0
    assert transport.requests == [(LOCATION_URL, {"api": "location"})]


def test_trigger_is_noop_when_not_idle() -> None:
    machine, transport, _ = _make_machine()
    machine.trigger()
    assert machine.trigger() is False
    assert len(transport.requests) == 1


def test_location_success_requests_forecast() -> None:
    machine, transport, clock = _make_machine()
    machine.trigger()
    clock.advance(seconds=2)
    machine.on_response("location", 200, GEO_BODY)

    assert machine.stage == "fetching_forecast"
    assert machine.state.last_requested == T0 + timedelta(seconds=2)
    url, context = transport.requests[-1]
    assert context == {"api": "forecast"}
    assert url.startswith(FORECAST_URL + "?")
    assert "timezone=Asia%2FTokyo" in url
    assert "latitude=35.694" in url
    assert "longitude=139.754" in url


def test_forecast_success_stores_snapshot_and_returns_to_idle() -> None:
    machine, _, clock = _make_machine()
    machine.trigger()
    machine.on_response("location", 200, GEO_BODY)
    clock.advance(seconds=3)
    machine.on_response("forecast", 200, FIXTURE_PATH.read_bytes())

    assert machine.stage == "idle"
    assert machine.state.forecast is not None
    assert len(machine.state.forecast.hourly) == 48
    assert machine.state.last_updated == T0 + timedelta(seconds=3)


@pytest.mark.parametrize(
    ("status", "body"),
    [
        (500, GEO_BODY),
        (404, b""),
        (0, b""),
        (200, b"<html>rate limited</html>"),
        (200, b'{"lat": 1.0, "lon": 2.0, "timezone": "Nowhere/Special"}'),
        (200, b'{"lat": 1.0, "lon": 2.0, "timezone": "America"}'),
    ],
)
def test_location_failure_reverts_to_idle(status: int, body: bytes) -> None:
    machine, transport, _ = _make_machine()
    machine.trigger()
    machine.on_response("location", status, body)
    assert machine.stage == "idle"
    assert machine.state.forecast is None
    assert len(transport.requests) == 1


@pytest.mark.parametrize(
    ("status", "body"),
    [
        (503, b""),
        (200, b'{"timezone": "Asia/Tokyo"}'),
        (200, b'{"timezone": "Bad/Zone", "hourly": {}, "daily": {}}'),
        (200, FIXTURE_PATH.read_bytes().replace(b'"Asia/Seoul"', b'"Europe"')),
    ],
)
def test_forecast_failure_keeps_previous_snapshot(status: int, body: bytes) -> None:
    machine, _, clock = _make_machine()
    _run_full_cycle(machine)
    previous = machine.state.forecast
    previous_updated = machine.state.last_updated

    clock.advance(hours=1)
    machine.trigger()
    machine.on_response("location", 200, GEO_BODY)
    machine.on_response("forecast", status, body)

    assert machine.stage == "idle"
    assert machine.state.forecast is previous
    assert machine.state.last_updated == previous_updated


def test_rejected_location_payload_is_logged_redacted(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="test_state_machine")
    machine, _, _ = _make_machine()
    machine.trigger()
    machine.on_response(
        "location",
        200,
        b'{"status":"fail","message":"reserved range","query":"142.250.196.110","isp":"Example ISP"}',
    )

    assert machine.stage == "idle"
    assert "142.250.196.110" not in caplog.text
    assert "Example ISP" not in caplog.text
    assert REDACTED in caplog.text
    assert "reserved range" in caplog.text
    assert {record.stage for record in caplog.records} == {"fetching_location"}


def test_rejected_plain_text_payload_masks_addresses(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="test_state_machine")
    machine, _, _ = _make_machine()
    machine.trigger()
    machine.on_response("location", 403, b"blocked request from 203.0.113.7")

    assert "203.0.113.7" not in caplog.text
    assert f"blocked request from {REDACTED}" in caplog.text


def test_payload_preview_masks_identity_keys() -> None:
    preview = payload_preview(b'{"lat": 1.0, "query": "10.0.0.1", "org": "Example Org"}')
    assert preview == {"lat": 1.0, "query": REDACTED, "org": REDACTED}
    assert payload_preview(b"x" * 1000) == "x" * 300


def test_forecast_response_while_idle_is_ignored() -> None:
    machine, transport, _ = _make_machine()
    before = dataclasses.replace(machine.state)
    machine.on_response("forecast", 200, FIXTURE_PATH.read_bytes())
    assert machine.state == before
    assert transport.requests == []


def test_location_response_while_fetching_forecast_is_ignored() -> None:
    machine, transport, _ = _make_machine()
    machine.trigger()
    machine.on_response("location", 200, GEO_BODY)
    before = dataclasses.replace(machine.state)

    machine.on_response("location", 200, GEO_BODY)

    assert machine.state == before
    assert len(transport.requests) == 2


def test_untagged_event_is_ignored() -> None:
    machine, _, _ = _make_machine()
    machine.trigger()
    machine.handle_response_event(200, {}, GEO_BODY, {})
    assert machine.stage == "fetching_location"


def test_response_event_routes_by_context_tag() -> None:
    machine, _, _ = _make_machine()
    machine.trigger()
    machine.handle_response_event(
        200,
        {"content-type": "application/json"},
        GEO_BODY,
        {"api": "location"},
    )
    assert machine.stage == "fetching_forecast"


def test_stall_recovery_returns_to_idle_after_timeout() -> None:
    machine, _, clock = _make_machine()
    _run_full_cycle(machine)
    cached = machine.state.forecast
    machine.trigger()

    clock.advance(seconds=119)
    assert machine.recover_if_stalled() is False
    assert machine.stage == "fetching_location"

    clock.advance(seconds=1)
    assert machine.recover_if_stalled() is True
    assert machine.stage == "idle"
    assert machine.state.forecast is cached


def test_late_response_after_stall_recovery_is_ignored() -> None:
    machine, _, clock = _make_machine()
    machine.trigger()
    machine.on_response("location", 200, GEO_BODY)
    clock.advance(minutes=5)
    machine.recover_if_stalled()

    machine.on_response("forecast", 200, FIXTURE_PATH.read_bytes())
    assert machine.state.forecast is None
    assert machine.stage == "idle"


def test_idle_machine_is_never_stalled() -> None:
    machine, _, clock = _make_machine()
    clock.advance(hours=5)
    assert machine.recover_if_stalled() is False


def test_forecast_url_has_fixed_query_shape() -> None:
    location = decode_geolocation(
        b'{"lat": -33.8688, "lon": 151.2093, "timezone": "America/Argentina/Buenos_Aires"}'
    )
    url = build_forecast_url(FORECAST_URL, location)
    query = parse_qs(urlsplit(url).query)

    assert query["latitude"] == ["-33.8688"]
    assert query["longitude"] == ["151.2093"]
    assert query["hourly"] == ["temperature_2m,apparent_temperature,weather_code,wind_speed_10m"]
    assert query["daily"] == [
        "weather_code,temperature_2m_max,temperature_2m_min,"
        "apparent_temperature_max,apparent_temperature_min"
    ]
    assert query["timezone"] == ["America/Argentina/Buenos_Aires"]
    assert query["forecast_days"] == ["2"]
    assert "timezone=America%2FArgentina%2FBuenos_Aires" in url
    assert "hourly=temperature_2m,apparent_temperature" in url
