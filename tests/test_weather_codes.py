"""Tests for WMO code classification and umbrella advisories."""

from __future__ import annotations

import pytest

from weather_widget.weather.codes import (
    UnknownWeatherCode,
    WeatherCode,
    classify,
    need_umbrella,
)


def test_moderate_rain_band_needs_umbrella() -> None:
    condition = classify(61)
    assert condition is WeatherCode.RAIN_SLIGHT
    assert need_umbrella(condition) == "sure"


def test_light_drizzle_is_maybe() -> None:
    assert need_umbrella(classify(51)) == "maybe"


def test_overcast_does_not_need_umbrella() -> None:
    condition = classify(3)
    assert condition is WeatherCode.OVERCAST
    assert condition.label == "Overcast"
    assert need_umbrella(condition) == "no"


def test_unlisted_code_is_unknown_and_never_warns() -> None:
    condition = classify(42)
    assert condition == UnknownWeatherCode(42)
    assert condition.raw_code == 42
    assert condition.label == "Unknown (42)"
    assert need_umbrella(condition) == "no"


@pytest.mark.parametrize("raw", [51, 53, 71, 77, 85])
def test_maybe_codes(raw: int) -> None:
    assert need_umbrella(classify(raw)) == "maybe"


@pytest.mark.parametrize(
    "raw",
    [55, 56, 57, 61, 63, 65, 73, 75, 80, 81, 82, 86, 95, 96, 99],
)
def test_sure_codes(raw: int) -> None:
    assert need_umbrella(classify(raw)) == "sure"


@pytest.mark.parametrize("raw", [0, 1, 2, 3, 45, 48, 66, 67])
def test_dry_and_freezing_rain_codes_are_no(raw: int) -> None:
    assert need_umbrella(classify(raw)) == "no"


@pytest.mark.parametrize("raw", [-1, 4, 100, 1000])
def test_future_codes_default_to_no(raw: int) -> None:
    condition = classify(raw)
    assert isinstance(condition, UnknownWeatherCode)
    assert need_umbrella(condition) == "no"


def test_every_known_code_has_label_and_advisory() -> None:
    for code in WeatherCode:
        assert classify(int(code)) is code
        assert code.label
        assert need_umbrella(code) in {"no", "maybe", "sure"}
