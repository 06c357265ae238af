"""
Unit tests for the Mailchimp and ConvertKit adapters.
"""

import json

import httpx
import pytest

from afk_waitlist.adapters.email_marketing import (
    DEFAULT_SIGNUP_SOURCE,
    ConvertKitSink,
    MailchimpSink,
)


class TestMailchimpSink:
    @pytest.mark.asyncio
    async def test_subscribe_posts_member(self, mock_client) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"id": "abc"})

        sink = MailchimpSink("mc-key", "list1", server_prefix="us21", client=mock_client(handler))
        result = await sink.subscribe("user@example.com", "Los Angeles")

        assert result.ok is True
        assert result.sink == "email"
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://us21.api.mailchimp.com/3.0/lists/list1/members"
        assert request.headers["Authorization"] == "Bearer mc-key"
        assert json.loads(request.content) == {
            "email_address": "user@example.com",
            "status": "subscribed",
            "merge_fields": {
                "LOCATION": "Los Angeles",
                "SIGNUP_SOURCE": DEFAULT_SIGNUP_SOURCE,
            },
            "tags": ["waitlist", "la-launch"],
        }

    @pytest.mark.asyncio
    async def test_custom_tags(self, mock_client) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200)

        sink = MailchimpSink("mc-key", "list1", tags=("beta",), client=mock_client(handler))
        await sink.subscribe("user@example.com", "Chicago")

        assert json.loads(captured[0].content)["tags"] == ["beta"]

    @pytest.mark.asyncio
    async def test_rejection_is_failure(self, mock_client) -> None:
        sink = MailchimpSink(
            "mc-key",
            "list1",
            client=mock_client(lambda request: httpx.Response(400, json={"title": "Member Exists"})),
        )
        result = await sink.subscribe("user@example.com", "Los Angeles")

        assert result.ok is False
        assert result.error == "HTTP 400"

    @pytest.mark.asyncio
    async def test_timeout_is_failure(self, mock_client) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        sink = MailchimpSink("mc-key", "list1", client=mock_client(handler))
        result = await sink.subscribe("user@example.com", "Los Angeles")

        assert result.ok is False
        assert "ReadTimeout" in (result.error or "")

    @pytest.mark.asyncio
    async def test_missing_credentials(self) -> None:
        sink = MailchimpSink(None, None)
        result = await sink.subscribe("user@example.com", "Los Angeles")

        assert result.ok is False
        assert result.error == "missing configuration: api_key, list_id"


class TestConvertKitSink:
    @pytest.mark.asyncio
    async def test_subscribe_posts_form(self, mock_client) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"subscription": {"id": 1}})

        sink = ConvertKitSink("ck-key", "form9", client=mock_client(handler))
        result = await sink.subscribe("user@example.com", "Seattle")

        assert result.ok is True
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.convertkit.com/v3/forms/form9/subscribe"
        assert json.loads(request.content) == {
            "api_key": "ck-key",
            "email": "user@example.com",
            "fields": {"location": "Seattle"},
            "tags": ["waitlist", "la-launch"],
        }

    @pytest.mark.asyncio
    async def test_server_error_is_failure(self, mock_client) -> None:
        sink = ConvertKitSink(
            "ck-key",
            "form9",
            client=mock_client(lambda request: httpx.Response(502)),
        )
        result = await sink.subscribe("user@example.com", "Seattle")

        assert result.ok is False
        assert result.error == "HTTP 502"

    @pytest.mark.asyncio
    async def test_missing_form_id(self) -> None:
        sink = ConvertKitSink("ck-key", None)
        result = await sink.subscribe("user@example.com", "Seattle")

        assert result.ok is False
        assert result.error == "missing configuration: form_id"
