"""
Waitlist component ports.

Protocol interfaces for waitlist pipeline dependencies.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from typing import Protocol

from afk_waitlist.components.waitlist.models import (
    RateLimitEntry,
    SinkResult,
    SubmissionRecord,
)


class ClockPort(Protocol):
    """Protocol for time operations (enables testing with deterministic time)."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...


class RateLimitStorePort(Protocol):
    """
    Rate limit state store.

    Holds one RateLimitEntry per caller identifier.
    """

    def get(self, identifier: str) -> RateLimitEntry | None:
        """Get entry for identifier."""
        ...

    def put(self, identifier: str, entry: RateLimitEntry) -> None:
        """Create or replace entry for identifier."""
        ...

    def delete(self, identifier: str) -> None:
        """Remove entry for identifier (no-op if absent)."""
        ...

    def items(self) -> Iterator[tuple[str, RateLimitEntry]]:
        """Iterate over a snapshot of all entries."""
        ...

    def __len__(self) -> int: ...


class DuplicateLookupPort(Protocol):
    """
    Capability to list emails already present in the system of record.

    Implementations may raise on any failure; the duplicate checker
    treats failures as "not a duplicate".
    """

    async def fetch_emails(self) -> list[str]:
        """Return every recipient email currently stored."""
        ...


class SpreadsheetSinkPort(Protocol):
    """Append-only spreadsheet sink (system of record)."""

    async def append(self, record: SubmissionRecord) -> SinkResult:
        """
        Append one submission row.

        Args:
            record: Row to append

        Returns:
            SinkResult; never raises for remote failures
        """
        ...


class EmailSinkPort(Protocol):
    """Email-marketing subscription sink."""

    async def subscribe(self, email: str, location: str) -> SinkResult:
        """
        Subscribe an address to the launch sequence.

        Args:
            email: Sanitized, lower-cased email
            location: Sanitized location

        Returns:
            SinkResult; never raises for remote failures
        """
        ...


class CombinedEndpointPort(Protocol):
    """
    Single combined endpoint (script-backed deployment).

    Replaces the spreadsheet and email sinks with one call.
    """

    async def submit(self, email: str, location: str) -> SinkResult:
        """Submit email and location in one request."""
        ...
