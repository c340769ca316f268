"""Hourly refresh policy for the fetch state machine."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from .models import FetchStage, ensure_utc
from .state_machine import FetchStateMachine


def should_fetch(now: datetime, stage: FetchStage, last_updated: datetime | None) -> bool:
    """Refresh once per wall-clock hour boundary, and only from idle.

    Both times are compared as UTC hour-of-day, so 09:59 -> 10:00 refreshes
    while 09:01 -> 09:59 does not. Several skipped boundaries still yield a
    single refresh per evaluation.
    """
    if stage != "idle":
        return False
    if last_updated is None:
        return True
    return ensure_utc(now).hour != ensure_utc(last_updated).hour


class RefreshScheduler:
    """Evaluate the refresh policy on every host timer tick."""

    def __init__(
        self,
        *,
        machine: FetchStateMachine,
        logger: logging.Logger,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self.machine = machine
        self.logger = logger
        self._now_provider = now_provider or (lambda: datetime.now(UTC))

    def tick(self, now: datetime | None = None) -> bool:
        """Handle one timer tick. Returns True when a refresh was started."""
        current = ensure_utc(now if now is not None else self._now_provider())
        self.machine.recover_if_stalled(current)
        state = self.machine.state
        if not should_fetch(current, state.stage, state.last_updated):
            return False
        self.logger.debug("Hour boundary crossed since last update; refreshing")
        return self.machine.trigger(current)

    def force_fetch(self, now: datetime | None = None) -> bool:
        """Start a refresh regardless of the hour gate (still requires idle)."""
        return self.machine.trigger(now)
