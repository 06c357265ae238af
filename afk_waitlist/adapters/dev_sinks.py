"""
Dev sink adapters.

Log submissions instead of sending them. Used for local development
and testing.

Production uses Google Sheets plus Mailchimp/ConvertKit (or the script
endpoint); these adapters let the full pipeline run without credentials.

Key behaviors:
- Logs each call at a configurable level
- Stores calls in memory for test assertions
- Can be told to fail, to exercise partial-failure paths
- DevSpreadsheetSink also serves duplicate lookups from what it stored
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from afk_waitlist.components.waitlist.models import SinkResult, SubmissionRecord

logger = logging.getLogger(__name__)


@dataclass
class LoggedSubscription:
    """Record of a logged email subscription for test assertions."""

    email: str
    location: str
    logged_at: datetime


@dataclass
class DevSpreadsheetSink:
    """
    Dev spreadsheet that keeps rows in memory.

    Implements SpreadsheetSinkPort and DuplicateLookupPort.
    """

    rows: list[SubmissionRecord] = field(default_factory=list)

    # Configuration
    log_level: int = logging.INFO
    fail: bool = False

    async def append(self, record: SubmissionRecord) -> SinkResult:
        if self.fail:
            logger.log(self.log_level, "SHEET (dev): refusing append for %s", record.email)
            return SinkResult.failure("spreadsheet", "Dev mode - configured to fail")

        self.rows.append(record)
        logger.log(
            self.log_level,
            "SHEET (dev): Email=%s, Location=%s, Tag=%s",
            record.email,
            record.location,
            record.source_tag,
        )
        return SinkResult.success("spreadsheet")

    async def fetch_emails(self) -> list[str]:
        return [row.email for row in self.rows]

    def clear(self) -> None:
        """Clear all stored rows (for test isolation)."""
        self.rows.clear()


@dataclass
class DevEmailSink:
    """
    Dev email-marketing sink that logs instead of subscribing.

    Implements EmailSinkPort.
    """

    subscriptions: list[LoggedSubscription] = field(default_factory=list)

    # Configuration
    log_level: int = logging.INFO
    fail: bool = False

    async def subscribe(self, email: str, location: str) -> SinkResult:
        if self.fail:
            return SinkResult.failure("email", "Dev mode - configured to fail")

        self.subscriptions.append(
            LoggedSubscription(email=email, location=location, logged_at=datetime.now(UTC))
        )
        logger.log(self.log_level, "SUBSCRIBE (dev): Email=%s, Location=%s", email, location)
        return SinkResult.success("email")

    # --- Test Helper Methods ---

    def get_last_subscription(self) -> LoggedSubscription | None:
        """Get the most recent subscription."""
        return self.subscriptions[-1] if self.subscriptions else None

    @property
    def subscription_count(self) -> int:
        return len(self.subscriptions)

    def clear(self) -> None:
        """Clear all stored subscriptions (for test isolation)."""
        self.subscriptions.clear()
