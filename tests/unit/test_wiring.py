"""
Tests for dispatcher wiring: rules + settings -> a working dispatcher.
"""

import json

import httpx
import pytest

from afk_waitlist.adapters.email_marketing import ConvertKitSink, MailchimpSink
from afk_waitlist.app_shell.config import Settings
from afk_waitlist.app_shell.wiring import build_dispatcher, build_email_sink, build_rate_limiter
from afk_waitlist.components.waitlist import (
    ConfigurationError,
    OutcomeCode,
    SubmissionRequest,
    Transport,
)
from afk_waitlist.rules.models import Rules


def request_for(email: str, caller: str = "198.51.100.1") -> SubmissionRequest:
    return SubmissionRequest(email=email, location="Los Angeles", caller_identifier=caller)


class TestBuildRateLimiter:
    def test_uses_rules(self, rules: Rules, clock) -> None:
        rules = rules.model_copy(
            update={"rate_limits": rules.rate_limits.model_copy(update={"max_submissions": 1})}
        )
        limiter = build_rate_limiter(rules, clock)

        assert limiter.check_and_consume("ip") is True
        assert limiter.check_and_consume("ip") is False


class TestBuildEmailSink:
    def test_mailchimp_by_default(self, rules: Rules, production_env: dict[str, str]) -> None:
        sink = build_email_sink(rules, Settings.from_env(production_env))

        assert isinstance(sink, MailchimpSink)
        assert sink.server_prefix == "us21"

    def test_convertkit_by_env(self, rules: Rules) -> None:
        settings = Settings.from_env(
            {
                "EMAIL_PROVIDER": "convertkit",
                "CONVERTKIT_API_KEY": "ck-key",
                "CONVERTKIT_FORM_ID": "form9",
            }
        )
        sink = build_email_sink(rules, settings)

        assert isinstance(sink, ConvertKitSink)
        assert sink.tags == ("waitlist", "la-launch")


class TestBuildDispatcher:
    def test_missing_credentials_raise(self, rules: Rules) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            build_dispatcher(rules, Settings.from_env({}))

        assert "GOOGLE_SHEETS_API_KEY" in str(exc_info.value)
        assert len(exc_info.value.problems) == 3

    @pytest.mark.asyncio
    async def test_dev_sinks_detect_duplicates(
        self, rules: Rules, dev_settings: Settings, clock
    ) -> None:
        dispatcher = build_dispatcher(rules, dev_settings, clock=clock)

        first = await dispatcher.submit(request_for("user@example.com"))
        second = await dispatcher.submit(request_for("USER@example.com", caller="203.0.113.9"))

        assert first.success is True
        assert first.email_sequence_triggered is True
        assert second.code == OutcomeCode.DUPLICATE_EMAIL

    @pytest.mark.asyncio
    async def test_shared_rate_limiter(self, rules: Rules, dev_settings: Settings, clock) -> None:
        limiter = build_rate_limiter(rules, clock)
        first = build_dispatcher(rules, dev_settings, rate_limiter=limiter, clock=clock)
        second = build_dispatcher(rules, dev_settings, rate_limiter=limiter, clock=clock)

        for i in range(3):
            assert (await first.submit(request_for(f"u{i}@example.com"))).success is True

        outcome = await second.submit(request_for("u3@example.com"))
        assert outcome.code == OutcomeCode.RATE_LIMITED

    @pytest.mark.asyncio
    async def test_multi_sink_over_http(
        self, rules: Rules, production_env: dict[str, str], mock_client, clock
    ) -> None:
        seen: list[tuple[str, str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.host, request.url.path))
            if request.url.host == "sheets.googleapis.com" and request.method == "GET":
                return httpx.Response(200, json={"values": [["existing@example.com"]]})
            return httpx.Response(200, json={})

        dispatcher = build_dispatcher(
            rules,
            Settings.from_env(production_env),
            clock=clock,
            client=mock_client(handler),
        )
        outcome = await dispatcher.submit(request_for("new@example.com"))

        assert outcome.success is True
        assert outcome.email_sequence_triggered is True
        assert seen[0] == (
            "GET",
            "sheets.googleapis.com",
            "/v4/spreadsheets/sheet123/values/Waitlist",
        )
        assert sorted(seen[1:]) == [
            ("POST", "sheets.googleapis.com", "/v4/spreadsheets/sheet123/values/Waitlist:append"),
            ("POST", "us21.api.mailchimp.com", "/3.0/lists/list1/members"),
        ]

    @pytest.mark.asyncio
    async def test_multi_sink_duplicate_from_sheet(
        self, rules: Rules, production_env: dict[str, str], mock_client, clock
    ) -> None:
        appended: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"values": [["existing@example.com"]]})
            appended.append(request)
            return httpx.Response(200, json={})

        dispatcher = build_dispatcher(
            rules,
            Settings.from_env(production_env),
            clock=clock,
            client=mock_client(handler),
        )
        outcome = await dispatcher.submit(request_for("Existing@Example.com"))

        assert outcome.code == OutcomeCode.DUPLICATE_EMAIL
        assert appended == []

    @pytest.mark.asyncio
    async def test_script_transport(self, rules: Rules, mock_client, clock) -> None:
        rules = rules.model_copy(
            update={"dispatch": rules.dispatch.model_copy(update={"transport": Transport.SCRIPT})}
        )
        settings = Settings.from_env(
            {"WAITLIST_SCRIPT_URL": "https://script.example.com/macros/s/abc"}
        )
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=json.dumps({"status": "success"}))

        dispatcher = build_dispatcher(rules, settings, clock=clock, client=mock_client(handler))
        outcome = await dispatcher.submit(request_for("user@example.com"))

        assert dispatcher.transport is Transport.SCRIPT
        assert outcome.success is True
        assert outcome.email_sequence_triggered is None
        assert len(seen) == 1
        assert seen[0].url.path == "/macros/s/abc/exec"
