"""Decode ip-api.com and Open-Meteo payloads into validated domain structures.

Decoding is all-or-nothing: either a fully populated ``Geolocation`` /
``ForecastSnapshot`` comes back, or ``DecodeError`` (or its subclass
``TimezoneResolutionError``) is raised and nothing is kept.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from typing import Annotated, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import (
    BaseModel,
    Field,
    StrictInt,
    ValidationError,
    field_validator,
    model_validator,
)

from ..exceptions import DecodeError, TimezoneResolutionError
from .codes import classify
from .models import DailySeries, ForecastSnapshot, Geolocation, HourlySeries

HOURLY_TIME_FORMAT = "%Y-%m-%dT%H:%M"
DAILY_DATE_FORMAT = "%Y-%m-%d"

# JSON NaN/Infinity literals are rejected along with numeric strings.
_FiniteFloat = Annotated[float, Field(strict=True, allow_inf_nan=False)]


def resolve_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA zone id, raising TimezoneResolutionError when unknown."""
    candidate = name.strip()
    if not candidate:
        raise TimezoneResolutionError(name)
    try:
        return ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        # Directory names such as "America" surface as IsADirectoryError.
        raise TimezoneResolutionError(name) from exc


def _parse_string_list(value: Any, fmt: str) -> list[datetime]:
    if not isinstance(value, list):
        raise ValueError(f"expected a list of timestamps, got {type(value).__name__}")
    parsed: list[datetime] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"expected timestamp string, got {type(item).__name__}")
        parsed.append(datetime.strptime(item, fmt))
    return parsed


def _require_increasing(values: Sequence[date | datetime], label: str) -> None:
    for previous, current in zip(values, values[1:]):
        if current <= previous:
            raise ValueError(f"{label} must be strictly increasing ({previous} >= {current})")


def _require_lengths(expected: int, key: str, columns: dict[str, Sequence[Any]]) -> None:
    for name, column in columns.items():
        if len(column) != expected:
            raise ValueError(
                f"'{name}' has {len(column)} entries but '{key}' has {expected}"
            )


def _describe(exc: ValidationError) -> str:
    # Payload values stay out of the message; ip-api echoes the caller's address.
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}"
        for error in exc.errors(include_url=False, include_input=False)
    )


class _IpGeolocationPayload(BaseModel):
    lat: _FiniteFloat = Field(ge=-90, le=90)
    lon: _FiniteFloat = Field(ge=-180, le=180)
    timezone: str

    @model_validator(mode="before")
    @classmethod
    def reject_failed_lookup(cls, data: Any) -> Any:
        # ip-api answers 200 with status="fail" for private or reserved ranges.
        if isinstance(data, dict) and data.get("status", "success") != "success":
            raise ValueError(
                f"lookup reported status={data.get('status')!r}: {data.get('message') or '-'}"
            )
        return data


class _HourlyBlock(BaseModel):
    time: list[datetime]
    weather_code: list[StrictInt]
    temperature_2m: list[_FiniteFloat]
    apparent_temperature: list[_FiniteFloat]
    wind_speed_10m: list[_FiniteFloat]

    @field_validator("time", mode="before")
    @classmethod
    def parse_local_minutes(cls, value: Any) -> list[datetime]:
        return _parse_string_list(value, HOURLY_TIME_FORMAT)

    @model_validator(mode="after")
    def check_shape(self) -> _HourlyBlock:
        _require_lengths(
            len(self.time),
            "time",
            {
                "weather_code": self.weather_code,
                "temperature_2m": self.temperature_2m,
                "apparent_temperature": self.apparent_temperature,
                "wind_speed_10m": self.wind_speed_10m,
            },
        )
        _require_increasing(self.time, "hourly time")
        return self


class _DailyBlock(BaseModel):
    time: list[date]
    weather_code: list[StrictInt]
    temperature_2m_min: list[_FiniteFloat]
    temperature_2m_max: list[_FiniteFloat]
    apparent_temperature_min: list[_FiniteFloat]
    apparent_temperature_max: list[_FiniteFloat]

    @field_validator("time", mode="before")
    @classmethod
    def parse_local_dates(cls, value: Any) -> list[date]:
        return [item.date() for item in _parse_string_list(value, DAILY_DATE_FORMAT)]

    @model_validator(mode="after")
    def check_shape(self) -> _DailyBlock:
        _require_lengths(
            len(self.time),
            "time",
            {
                "weather_code": self.weather_code,
                "temperature_2m_min": self.temperature_2m_min,
                "temperature_2m_max": self.temperature_2m_max,
                "apparent_temperature_min": self.apparent_temperature_min,
                "apparent_temperature_max": self.apparent_temperature_max,
            },
        )
        _require_increasing(self.time, "daily time")
        return self


class _ForecastPayload(BaseModel):
    timezone: str
    hourly: _HourlyBlock
    daily: _DailyBlock


def decode_geolocation(body: bytes | str) -> Geolocation:
    """Decode an ip-api.com JSON body."""
    try:
        payload = _IpGeolocationPayload.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(f"Geolocation payload failed validation: {_describe(exc)}") from exc

    return Geolocation(
        latitude=payload.lat,
        longitude=payload.lon,
        timezone=resolve_timezone(payload.timezone),
    )


def decode_forecast(body: bytes | str) -> ForecastSnapshot:
    """Decode an Open-Meteo forecast body.

    Hourly timestamps carry no UTC offset in the payload; they are attached
    to the payload's own declared zone, never the host's local zone.
    """
    try:
        payload = _ForecastPayload.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(f"Forecast payload failed validation: {_describe(exc)}") from exc

    zone = resolve_timezone(payload.timezone)
    hourly = payload.hourly
    daily = payload.daily
    return ForecastSnapshot(
        timezone=zone,
        hourly=HourlySeries(
            timestamps=tuple(ts.replace(tzinfo=zone) for ts in hourly.time),
            weather_code=tuple(classify(code) for code in hourly.weather_code),
            temperature=tuple(float(v) for v in hourly.temperature_2m),
            apparent_temperature=tuple(float(v) for v in hourly.apparent_temperature),
            wind_speed=tuple(float(v) for v in hourly.wind_speed_10m),
        ),
        daily=DailySeries(
            dates=tuple(daily.time),
            weather_code=tuple(classify(code) for code in daily.weather_code),
            temp_min=tuple(float(v) for v in daily.temperature_2m_min),
            temp_max=tuple(float(v) for v in daily.temperature_2m_max),
            apparent_temp_min=tuple(float(v) for v in daily.apparent_temperature_min),
            apparent_temp_max=tuple(float(v) for v in daily.apparent_temperature_max),
        ),
    )
