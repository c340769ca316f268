"""WMO weather interpretation codes and the umbrella advisory derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal, TypeAlias

UmbrellaAdvisory = Literal["no", "maybe", "sure"]


class WeatherCode(IntEnum):
    """Known WMO codes reported by the forecast provider."""

    CLEAR_SKY = 0
    MAINLY_CLEAR = 1
    PARTLY_CLOUDY = 2
    OVERCAST = 3
    FOG = 45
    RIME_FOG = 48
    DRIZZLE_LIGHT = 51
    DRIZZLE_MODERATE = 53
    DRIZZLE_DENSE = 55
    FREEZING_DRIZZLE_LIGHT = 56
    FREEZING_DRIZZLE_HEAVY = 57
    RAIN_SLIGHT = 61
    RAIN_MODERATE = 63
    RAIN_HEAVY = 65
    FREEZING_RAIN_LIGHT = 66
    FREEZING_RAIN_HEAVY = 67
    SNOWFALL_SLIGHT = 71
    SNOWFALL_MODERATE = 73
    SNOWFALL_HEAVY = 75
    SNOW_GRAINS = 77
    RAIN_SHOWERS_SLIGHT = 80
    RAIN_SHOWERS_MODERATE = 81
    RAIN_SHOWERS_VIOLENT = 82
    SNOW_SHOWERS_SLIGHT = 85
    SNOW_SHOWERS_HEAVY = 86
    THUNDERSTORM = 95
    THUNDERSTORM_SLIGHT_HAIL = 96
    THUNDERSTORM_HEAVY_HAIL = 99

    @property
    def label(self) -> str:
        return _LABELS[self]


@dataclass(frozen=True, slots=True)
class UnknownWeatherCode:
    """A code outside the known table, kept verbatim."""

    raw_code: int

    @property
    def label(self) -> str:
        return f"Unknown ({self.raw_code})"


WeatherCondition: TypeAlias = WeatherCode | UnknownWeatherCode

_LABELS: dict[WeatherCode, str] = {
    WeatherCode.CLEAR_SKY: "Clear sky",
    WeatherCode.MAINLY_CLEAR: "Mainly clear",
    WeatherCode.PARTLY_CLOUDY: "Partly cloudy",
    WeatherCode.OVERCAST: "Overcast",
    WeatherCode.FOG: "Fog",
    WeatherCode.RIME_FOG: "Rime fog",
    WeatherCode.DRIZZLE_LIGHT: "Light drizzle",
    WeatherCode.DRIZZLE_MODERATE: "Moderate drizzle",
    WeatherCode.DRIZZLE_DENSE: "Dense drizzle",
    WeatherCode.FREEZING_DRIZZLE_LIGHT: "Light freezing drizzle",
    WeatherCode.FREEZING_DRIZZLE_HEAVY: "Heavy freezing drizzle",
    WeatherCode.RAIN_SLIGHT: "Slight rain",
    WeatherCode.RAIN_MODERATE: "Moderate rain",
    WeatherCode.RAIN_HEAVY: "Heavy rain",
    WeatherCode.FREEZING_RAIN_LIGHT: "Light freezing rain",
    WeatherCode.FREEZING_RAIN_HEAVY: "Heavy freezing rain",
    WeatherCode.SNOWFALL_SLIGHT: "Slight snowfall",
    WeatherCode.SNOWFALL_MODERATE: "Moderate snowfall",
    WeatherCode.SNOWFALL_HEAVY: "Heavy snowfall",
    WeatherCode.SNOW_GRAINS: "Snow grains",
    WeatherCode.RAIN_SHOWERS_SLIGHT: "Slight rain showers",
    WeatherCode.RAIN_SHOWERS_MODERATE: "Moderate rain showers",
    WeatherCode.RAIN_SHOWERS_VIOLENT: "Violent rain showers",
    WeatherCode.SNOW_SHOWERS_SLIGHT: "Slight snow showers",
    WeatherCode.SNOW_SHOWERS_HEAVY: "Heavy snow showers",
    WeatherCode.THUNDERSTORM: "Thunderstorm",
    WeatherCode.THUNDERSTORM_SLIGHT_HAIL: "Thunderstorm with slight hail",
    WeatherCode.THUNDERSTORM_HEAVY_HAIL: "Thunderstorm with heavy hail",
}

_MAYBE: frozenset[WeatherCode] = frozenset(
    {
        WeatherCode.DRIZZLE_LIGHT,
        WeatherCode.DRIZZLE_MODERATE,
        WeatherCode.SNOWFALL_SLIGHT,
        WeatherCode.SNOW_GRAINS,
        WeatherCode.SNOW_SHOWERS_SLIGHT,
    }
)

# Freezing rain is intentionally absent from both sets.
_SURE: frozenset[WeatherCode] = frozenset(
    {
        WeatherCode.DRIZZLE_DENSE,
        WeatherCode.FREEZING_DRIZZLE_LIGHT,
        WeatherCode.FREEZING_DRIZZLE_HEAVY,
        WeatherCode.RAIN_SLIGHT,
        WeatherCode.RAIN_MODERATE,
        WeatherCode.RAIN_HEAVY,
        WeatherCode.SNOWFALL_MODERATE,
        WeatherCode.SNOWFALL_HEAVY,
        WeatherCode.RAIN_SHOWERS_SLIGHT,
        WeatherCode.RAIN_SHOWERS_MODERATE,
        WeatherCode.RAIN_SHOWERS_VIOLENT,
        WeatherCode.SNOW_SHOWERS_HEAVY,
        WeatherCode.THUNDERSTORM,
        WeatherCode.THUNDERSTORM_SLIGHT_HAIL,
        WeatherCode.THUNDERSTORM_HEAVY_HAIL,
    }
)


def classify(raw_code: int) -> WeatherCondition:
    """Map a raw WMO integer onto a known code, or wrap it as unknown."""
    try:
        return WeatherCode(raw_code)
    except ValueError:
        return UnknownWeatherCode(raw_code)


def need_umbrella(condition: WeatherCondition) -> UmbrellaAdvisory:
    """Return the umbrella advisory for a condition; unknown codes never warn."""
    if isinstance(condition, UnknownWeatherCode):
        return "no"
    if condition in _SURE:
        return "sure"
    if condition in _MAYBE:
        return "maybe"
    return "no"
