"""Terminal weather widget: IP geolocation, two-day forecast, umbrella hints."""

__version__ = "0.1.0"
