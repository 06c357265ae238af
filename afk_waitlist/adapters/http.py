"""
Shared plumbing for HTTP-backed sinks.

Each sink owns a timeout and either an injected httpx.AsyncClient
(tests, connection reuse) or a short-lived client per call.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from afk_waitlist.components.waitlist.models import SinkFailureError

DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpSink:
    """Base class for adapters that talk to an external HTTP service."""

    sink_name = "http"

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self.timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            yield client

    def _check_response(self, response: httpx.Response) -> None:
        """Raise SinkFailureError unless the response is 2xx."""
        if not response.is_success:
            raise SinkFailureError(self.sink_name, f"HTTP {response.status_code}")

    def _require(self, **values: str | None) -> None:
        """Raise SinkFailureError naming every missing configuration value."""
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise SinkFailureError(self.sink_name, f"missing configuration: {', '.join(missing)}")
