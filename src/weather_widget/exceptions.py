"""Application exception classes."""


class WeatherWidgetError(Exception):
    """Base class for all widget errors."""


class ConfigError(WeatherWidgetError):
    """Raised when configuration is invalid or incomplete."""


class FetchError(WeatherWidgetError):
    """Raised when one stage of the location/forecast pipeline fails."""


class TransportError(FetchError):
    """Raised for non-2xx HTTP responses (status 0 means no response at all)."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(FetchError):
    """Raised when a payload is malformed, incomplete, or length-mismatched."""


class TimezoneResolutionError(DecodeError):
    """Raised when a payload names a zone missing from the IANA database."""

    def __init__(self, zone_name: str) -> None:
        super().__init__(f"Unknown IANA timezone identifier: {zone_name!r}")
        self.zone_name = zone_name
