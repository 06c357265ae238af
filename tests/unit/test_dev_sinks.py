"""
Tests for the dev sink adapters.
"""

import logging
from datetime import UTC, datetime

import pytest

from afk_waitlist.adapters.dev_sinks import DevEmailSink, DevSpreadsheetSink
from afk_waitlist.components.waitlist import SubmissionRecord


def make_record(email: str = "user@example.com") -> SubmissionRecord:
    return SubmissionRecord(
        email=email,
        location="Los Angeles",
        submitted_at=datetime(2025, 1, 1, tzinfo=UTC),
        source_tag="Waitlist Signup",
    )


class TestDevSpreadsheetSink:
    @pytest.mark.asyncio
    async def test_append_stores_row(self) -> None:
        sink = DevSpreadsheetSink()
        result = await sink.append(make_record())

        assert result.ok is True
        assert [row.email for row in sink.rows] == ["user@example.com"]

    @pytest.mark.asyncio
    async def test_append_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = DevSpreadsheetSink()
        with caplog.at_level(logging.INFO):
            await sink.append(make_record())

        assert "SHEET (dev)" in caplog.text
        assert "user@example.com" in caplog.text

    @pytest.mark.asyncio
    async def test_fail_mode(self) -> None:
        sink = DevSpreadsheetSink(fail=True)
        result = await sink.append(make_record())

        assert result.ok is False
        assert sink.rows == []

    @pytest.mark.asyncio
    async def test_fetch_emails_reads_rows(self) -> None:
        sink = DevSpreadsheetSink()
        await sink.append(make_record("a@example.com"))
        await sink.append(make_record("b@example.com"))

        assert await sink.fetch_emails() == ["a@example.com", "b@example.com"]

    @pytest.mark.asyncio
    async def test_clear(self) -> None:
        sink = DevSpreadsheetSink()
        await sink.append(make_record())
        sink.clear()
        assert sink.rows == []


class TestDevEmailSink:
    @pytest.mark.asyncio
    async def test_subscribe_records(self) -> None:
        sink = DevEmailSink()
        result = await sink.subscribe("user@example.com", "Chicago")

        assert result.ok is True
        assert sink.subscription_count == 1
        last = sink.get_last_subscription()
        assert last is not None
        assert last.email == "user@example.com"
        assert last.location == "Chicago"

    @pytest.mark.asyncio
    async def test_fail_mode(self) -> None:
        sink = DevEmailSink(fail=True)
        result = await sink.subscribe("user@example.com", "Chicago")

        assert result.ok is False
        assert sink.subscription_count == 0

    def test_empty(self) -> None:
        sink = DevEmailSink()
        assert sink.get_last_subscription() is None

    @pytest.mark.asyncio
    async def test_clear(self) -> None:
        sink = DevEmailSink()
        await sink.subscribe("user@example.com", "Chicago")
        sink.clear()
        assert sink.subscription_count == 0
