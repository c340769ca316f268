"""Single-threaded host runtime: timer ticks and queued HTTP completions."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from .config import Settings
from .fetch.base import RequestTransport
from .fetch.models import WidgetState
from .fetch.scheduler import RefreshScheduler
from .fetch.state_machine import FetchStateMachine


@dataclass(slots=True)
class ResponseEvent:
    """A completed request, delivered back to the widget with its context."""

    status: int
    headers: dict[str, str]
    body: bytes
    context: dict[str, str] = field(default_factory=dict)


class HttpxRequestTransport(RequestTransport):
    """Queue GETs and execute them with httpx when the host drains the queue.

    A network-level failure is reported as status 0 with an empty body so
    that it reaches the state machine as an ordinary transport failure.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float,
        user_agent: str,
        logger: logging.Logger,
        client: httpx.Client | None = None,
    ) -> None:
        self.logger = logger
        self._client = client or httpx.Client(
            timeout=timeout_seconds,
            headers={"Accept": "application/json", "User-Agent": user_agent},
            follow_redirects=True,
        )
        self._pending: deque[tuple[str, dict[str, str]]] = deque()

    def __enter__(self) -> HttpxRequestTransport:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request(self, url: str, context: dict[str, str]) -> None:
        self._pending.append((url, dict(context)))

    def drain(self) -> list[ResponseEvent]:
        """Run queued requests in order and return their completion events."""
        events: list[ResponseEvent] = []
        while self._pending:
            url, context = self._pending.popleft()
            events.append(self._perform(url, context))
        return events

    def _perform(self, url: str, context: dict[str, str]) -> ResponseEvent:
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            self.logger.warning(
                "Request for %s failed (%s): %s",
                context.get("api", "?"),
                type(exc).__name__,
                exc,
            )
            return ResponseEvent(status=0, headers={}, body=b"", context=context)
        return ResponseEvent(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
            context=context,
        )


class WidgetRuntime:
    """Own one widget's state for the span between host init and teardown."""

    def __init__(
        self,
        *,
        settings: Settings,
        logger: logging.Logger,
        transport: HttpxRequestTransport | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.state = WidgetState()
        self.transport = transport or HttpxRequestTransport(
            timeout_seconds=settings.http_timeout_seconds,
            user_agent=settings.http_user_agent,
            logger=logger,
        )
        now_provider = now_provider or (lambda: datetime.now(UTC))
        self.machine = FetchStateMachine(
            state=self.state,
            transport=self.transport,
            location_url=settings.location_url,
            forecast_url=settings.forecast_url,
            logger=logger,
            stall_timeout=timedelta(seconds=settings.stall_timeout_seconds),
            now_provider=now_provider,
        )
        self.scheduler = RefreshScheduler(
            machine=self.machine,
            logger=logger,
            now_provider=now_provider,
        )
        self._closed = False

    def __enter__(self) -> WidgetRuntime:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def start(self) -> None:
        """Host init: kick off the first refresh without waiting for the hour gate."""
        self.logger.info("Widget runtime started")
        self.scheduler.force_fetch()

    def on_timer(self) -> bool:
        return self.scheduler.tick()

    def pump(self) -> int:
        """Deliver completed responses one at a time; returns events handled.

        Handling a location response queues the forecast request, so this
        keeps draining until the transport has nothing left.
        """
        handled = 0
        while self.transport.pending:
            for event in self.transport.drain():
                self.machine.handle_response_event(
                    event.status, event.headers, event.body, event.context
                )
                handled += 1
        return handled

    def refresh_now(self) -> bool:
        """Force one refresh and run it to completion. Returns True if data is cached."""
        self.scheduler.force_fetch()
        self.pump()
        return self.state.forecast is not None

    def close(self) -> None:
        """Host teardown."""
        if self._closed:
            return
        self._closed = True
        self.transport.close()
        self.logger.info("Widget runtime stopped")
