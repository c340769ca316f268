"""Location -> forecast fetch pipeline and its refresh policy."""

from .base import RequestTransport
from .models import CONTEXT_KEY, FORECAST_TAG, LOCATION_TAG, FetchStage, WidgetState
from .scheduler import RefreshScheduler, should_fetch
from .state_machine import FetchStateMachine, build_forecast_url

__all__ = [
    "CONTEXT_KEY",
    "FORECAST_TAG",
    "LOCATION_TAG",
    "FetchStage",
    "FetchStateMachine",
    "RefreshScheduler",
    "RequestTransport",
    "WidgetState",
    "build_forecast_url",
    "should_fetch",
]
