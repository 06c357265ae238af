"""
Google Sheets adapter.

The spreadsheet is the system of record: submissions are appended as rows
and the duplicate check reads the first column back.

Implements SpreadsheetSinkPort and DuplicateLookupPort.

Row layout: email, location, ISO timestamp, source tag.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from afk_waitlist.adapters.http import DEFAULT_TIMEOUT_SECONDS, HttpSink
from afk_waitlist.components.waitlist.models import (
    SinkFailureError,
    SinkResult,
    SubmissionRecord,
)

logger = logging.getLogger(__name__)

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
DEFAULT_SHEET_NAME = "Waitlist"


class GoogleSheetsSink(HttpSink):
    """Append and query rows through the Sheets v4 values API."""

    sink_name = "spreadsheet"

    def __init__(
        self,
        api_key: str | None,
        spreadsheet_id: str | None,
        *,
        sheet_name: str = DEFAULT_SHEET_NAME,
        base_url: str = SHEETS_API_BASE,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(client=client, timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.base_url = base_url.rstrip("/")

    def _values_url(self, suffix: str = "") -> str:
        sheet = quote(self.sheet_name, safe="")
        return f"{self.base_url}/{self.spreadsheet_id}/values/{sheet}{suffix}"

    async def append(self, record: SubmissionRecord) -> SinkResult:
        """Append one row. Any failure becomes a failed SinkResult."""
        try:
            self._require(api_key=self.api_key, spreadsheet_id=self.spreadsheet_id)
            async with self._http() as client:
                response = await client.post(
                    self._values_url(":append"),
                    params={"valueInputOption": "USER_ENTERED", "key": self.api_key},
                    json={"values": [record.as_row()]},
                )
            self._check_response(response)
        except SinkFailureError as e:
            logger.error("Google Sheets append failed: %s", e.reason)
            return SinkResult.failure(self.sink_name, e.reason)
        except httpx.HTTPError as e:
            logger.error("Google Sheets append error: %s", type(e).__name__)
            return SinkResult.failure(self.sink_name, f"{type(e).__name__}: {e}")

        return SinkResult.success(self.sink_name)

    async def fetch_emails(self) -> list[str]:
        """
        Read the first column of every row.

        Raises:
            SinkFailureError: missing configuration, non-2xx or malformed body
            httpx.HTTPError: transport failure
        """
        self._require(api_key=self.api_key, spreadsheet_id=self.spreadsheet_id)
        async with self._http() as client:
            response = await client.get(self._values_url(), params={"key": self.api_key})
        self._check_response(response)

        try:
            data: Any = response.json()
        except ValueError as e:
            raise SinkFailureError(self.sink_name, "response is not JSON") from e

        if not isinstance(data, dict):
            raise SinkFailureError(self.sink_name, "unexpected response shape")

        rows = data.get("values") or []
        if not isinstance(rows, list):
            raise SinkFailureError(self.sink_name, "'values' is not a list")

        return [
            row[0]
            for row in rows
            if isinstance(row, list) and row and isinstance(row[0], str)
        ]
