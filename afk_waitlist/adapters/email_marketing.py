"""
Email-marketing adapters.

Subscribe new waitlist members so the launch email sequence starts.
Two providers are supported; exactly one is wired at startup.

Implements EmailSinkPort.

Providers:
1. MailchimpSink: POST /3.0/lists/{list_id}/members, bearer auth
2. ConvertKitSink: POST /v3/forms/{form_id}/subscribe, api_key in body
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from afk_waitlist.adapters.http import DEFAULT_TIMEOUT_SECONDS, HttpSink
from afk_waitlist.components.waitlist.models import SinkFailureError, SinkResult

logger = logging.getLogger(__name__)

DEFAULT_TAGS: tuple[str, ...] = ("waitlist", "la-launch")
DEFAULT_SIGNUP_SOURCE = "Landing Page Waitlist"
CONVERTKIT_API_BASE = "https://api.convertkit.com/v3"


class _EmailMarketingSink(HttpSink):
    sink_name = "email"
    provider = "email"

    async def subscribe(self, email: str, location: str) -> SinkResult:
        """Subscribe email; any failure becomes a failed SinkResult."""
        try:
            await self._subscribe(email, location)
        except SinkFailureError as e:
            logger.error("%s subscribe failed: %s", self.provider, e.reason)
            return SinkResult.failure(self.sink_name, e.reason)
        except httpx.HTTPError as e:
            logger.error("%s subscribe error: %s", self.provider, type(e).__name__)
            return SinkResult.failure(self.sink_name, f"{type(e).__name__}: {e}")
        return SinkResult.success(self.sink_name)

    async def _subscribe(self, email: str, location: str) -> None:
        raise NotImplementedError


class MailchimpSink(_EmailMarketingSink):
    """Mailchimp list member subscription."""

    provider = "mailchimp"

    def __init__(
        self,
        api_key: str | None,
        list_id: str | None,
        *,
        server_prefix: str = "us1",
        tags: tuple[str, ...] = DEFAULT_TAGS,
        signup_source: str = DEFAULT_SIGNUP_SOURCE,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(client=client, timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self.list_id = list_id
        self.server_prefix = server_prefix
        self.tags = tags
        self.signup_source = signup_source

    @property
    def members_url(self) -> str:
        return f"https://{self.server_prefix}.api.mailchimp.com/3.0/lists/{self.list_id}/members"

    def build_payload(self, email: str, location: str) -> dict[str, Any]:
        return {
            "email_address": email,
            "status": "subscribed",
            "merge_fields": {
                "LOCATION": location,
                "SIGNUP_SOURCE": self.signup_source,
            },
            "tags": list(self.tags),
        }

    async def _subscribe(self, email: str, location: str) -> None:
        self._require(api_key=self.api_key, list_id=self.list_id)
        async with self._http() as client:
            response = await client.post(
                self.members_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=self.build_payload(email, location),
            )
        self._check_response(response)


class ConvertKitSink(_EmailMarketingSink):
    """ConvertKit form subscription."""

    provider = "convertkit"

    def __init__(
        self,
        api_key: str | None,
        form_id: str | None,
        *,
        tags: tuple[str, ...] = DEFAULT_TAGS,
        base_url: str = CONVERTKIT_API_BASE,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(client=client, timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self.form_id = form_id
        self.tags = tags
        self.base_url = base_url.rstrip("/")

    @property
    def subscribe_url(self) -> str:
        return f"{self.base_url}/forms/{self.form_id}/subscribe"

    def build_payload(self, email: str, location: str) -> dict[str, Any]:
        return {
            "api_key": self.api_key,
            "email": email,
            "fields": {"location": location},
            "tags": list(self.tags),
        }

    async def _subscribe(self, email: str, location: str) -> None:
        self._require(api_key=self.api_key, form_id=self.form_id)
        async with self._http() as client:
            response = await client.post(
                self.subscribe_url,
                json=self.build_payload(email, location),
            )
        self._check_response(response)
