"""Transport contract the fetch pipeline issues requests through."""

from __future__ import annotations

from abc import ABC, abstractmethod


class RequestTransport(ABC):
    """Fire-and-forget GET registration; completion arrives later as an event."""

    @abstractmethod
    def request(self, url: str, context: dict[str, str]) -> None:
        """Queue a GET for ``url``; ``context`` must be echoed back verbatim."""
