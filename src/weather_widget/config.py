"""Typed settings loader for the weather widget."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    location_url: str = Field(default="http://ip-api.com/json/", alias="LOCATION_URL")
    forecast_url: str = Field(
        default="https://api.open-meteo.com/v1/forecast",
        alias="FORECAST_URL",
    )
    http_timeout_seconds: float = Field(default=10.0, alias="HTTP_TIMEOUT_SECONDS")
    http_user_agent: str = Field(default="weather-widget/0.1", alias="HTTP_USER_AGENT")

    timer_interval_seconds: float = Field(default=60.0, alias="TIMER_INTERVAL_SECONDS")
    stall_timeout_seconds: float = Field(default=120.0, alias="STALL_TIMEOUT_SECONDS")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
    )
    temperature_unit_label: str = Field(default="°C", alias="TEMPERATURE_UNIT_LABEL")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_bounds(self) -> Settings:
        """Validate URLs and numeric bounds."""
        for name, url in (("LOCATION_URL", self.location_url), ("FORECAST_URL", self.forecast_url)):
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"{name} must be an http(s) URL.")
            if "?" in url:
                raise ValueError(f"{name} must not carry a query string.")
        if self.http_timeout_seconds <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be > 0.")
        if not self.http_user_agent.strip():
            raise ValueError("HTTP_USER_AGENT must not be empty.")
        if self.timer_interval_seconds <= 0:
            raise ValueError("TIMER_INTERVAL_SECONDS must be > 0.")
        if self.stall_timeout_seconds <= 0:
            raise ValueError("STALL_TIMEOUT_SECONDS must be > 0.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return settings that are safe to log at startup."""
        return {
            "location_url": self.location_url,
            "forecast_url": self.forecast_url,
            "http_timeout_seconds": self.http_timeout_seconds,
            "timer_interval_seconds": self.timer_interval_seconds,
            "stall_timeout_seconds": self.stall_timeout_seconds,
            "log_level": self.log_level,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
