"""
Script ("exec") endpoint adapter.

Legacy deployment mode: one GET to a script-backed endpoint stores the
row and sends the confirmation email itself.

Implements CombinedEndpointPort.

Contract:
    GET {base_url}/exec?email=...&location=...
    -> {"status": "success" | "error", "message": "..."}
"""

from __future__ import annotations

import logging

import httpx

from afk_waitlist.adapters.http import DEFAULT_TIMEOUT_SECONDS, HttpSink
from afk_waitlist.components.waitlist.models import SinkFailureError, SinkResult

logger = logging.getLogger(__name__)


class ScriptEndpointSink(HttpSink):
    sink_name = "combined"

    def __init__(
        self,
        base_url: str | None,
        *,
        exec_path: str = "/exec",
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(client=client, timeout_seconds=timeout_seconds)
        self.base_url = (base_url or "").rstrip("/")
        self.exec_path = exec_path

    @property
    def exec_url(self) -> str:
        return f"{self.base_url}{self.exec_path}"

    async def submit(self, email: str, location: str) -> SinkResult:
        try:
            self._require(base_url=self.base_url)
            async with self._http() as client:
                response = await client.get(
                    self.exec_url,
                    params={"email": email, "location": location},
                    follow_redirects=True,
                )
            self._check_response(response)
            self._check_status(response)
        except SinkFailureError as e:
            logger.error("Script endpoint failed: %s", e.reason)
            return SinkResult.failure(self.sink_name, e.reason)
        except httpx.HTTPError as e:
            logger.error("Script endpoint error: %s", type(e).__name__)
            return SinkResult.failure(self.sink_name, f"{type(e).__name__}: {e}")

        return SinkResult.success(self.sink_name)

    def _check_status(self, response: httpx.Response) -> None:
        try:
            data = response.json()
        except ValueError as e:
            raise SinkFailureError(self.sink_name, "response is not JSON") from e

        if not isinstance(data, dict):
            raise SinkFailureError(self.sink_name, "unexpected response shape")

        status = data.get("status")
        if status == "success":
            return
        message = data.get("message") or "no message"
        raise SinkFailureError(self.sink_name, f"status={status}: {message}")
