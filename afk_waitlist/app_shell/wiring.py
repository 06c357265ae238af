"""
Dispatcher wiring.

Builds a WaitlistDispatcher from rules (policy) and settings (credentials).
"""

from __future__ import annotations

import logging

import httpx

from afk_waitlist.adapters.dev_sinks import DevEmailSink, DevSpreadsheetSink
from afk_waitlist.adapters.email_marketing import ConvertKitSink, MailchimpSink
from afk_waitlist.adapters.google_sheets import GoogleSheetsSink
from afk_waitlist.adapters.script_endpoint import ScriptEndpointSink
from afk_waitlist.app_shell.config import Settings, validate_environment
from afk_waitlist.components.waitlist import (
    ClockPort,
    ConfigurationError,
    DuplicateChecker,
    EmailSinkPort,
    FixedWindowRateLimiter,
    InMemoryRateLimitStore,
    NullDuplicateLookup,
    SystemClock,
    Transport,
    WaitlistDispatcher,
)
from afk_waitlist.rules.models import Rules

logger = logging.getLogger(__name__)


def build_rate_limiter(rules: Rules, clock: ClockPort | None = None) -> FixedWindowRateLimiter:
    cfg = rules.rate_limits
    return FixedWindowRateLimiter(
        InMemoryRateLimitStore(max_entries=cfg.max_tracked_identifiers),
        clock,
        max_submissions=cfg.max_submissions,
        window_seconds=cfg.window_seconds,
        sweep_every=cfg.sweep_every,
    )


def build_email_sink(
    rules: Rules,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> EmailSinkPort:
    timeout = rules.dispatch.timeout_seconds
    tags = tuple(rules.dispatch.tags)
    if settings.resolved_email_provider(rules) == "convertkit":
        return ConvertKitSink(
            settings.convertkit_api_key,
            settings.convertkit_form_id,
            tags=tags,
            client=client,
            timeout_seconds=timeout,
        )
    return MailchimpSink(
        settings.mailchimp_api_key,
        settings.mailchimp_list_id,
        server_prefix=settings.mailchimp_server_prefix,
        tags=tags,
        client=client,
        timeout_seconds=timeout,
    )


def build_dispatcher(
    rules: Rules,
    settings: Settings,
    *,
    rate_limiter: FixedWindowRateLimiter | None = None,
    clock: ClockPort | None = None,
    client: httpx.AsyncClient | None = None,
) -> WaitlistDispatcher:
    """
    Wire sinks for the configured transport.

    Args:
        rules: Loaded rules (policy)
        settings: Environment settings (credentials)
        rate_limiter: Shared limiter; a fresh one is built if omitted
        clock: Clock override (tests)
        client: Shared HTTP client (tests, connection reuse)

    Returns:
        Ready-to-use dispatcher

    Raises:
        ConfigurationError: credentials for the configured transport are missing
    """
    problems = validate_environment(rules, settings)
    if problems:
        raise ConfigurationError(problems)

    clock = clock or SystemClock()
    config = rules.to_waitlist_config()
    limiter = rate_limiter or build_rate_limiter(rules, clock)
    timeout = rules.dispatch.timeout_seconds

    if settings.dev_sinks:
        logger.info("Using dev sinks; submissions are logged, not sent")
        sheet = DevSpreadsheetSink()
        return WaitlistDispatcher(
            spreadsheet=sheet,
            email_sink=DevEmailSink(),
            rate_limiter=limiter,
            duplicate_checker=DuplicateChecker(sheet),
            clock=clock,
            config=config,
        )

    if rules.dispatch.transport is Transport.SCRIPT:
        return WaitlistDispatcher(
            combined=ScriptEndpointSink(
                settings.script_url,
                exec_path=rules.dispatch.script_exec_path,
                client=client,
                timeout_seconds=timeout,
            ),
            rate_limiter=limiter,
            duplicate_checker=DuplicateChecker(NullDuplicateLookup()),
            clock=clock,
            config=config,
            transport=Transport.SCRIPT,
        )

    sheets = GoogleSheetsSink(
        settings.google_sheets_api_key,
        settings.google_spreadsheet_id,
        sheet_name=rules.dispatch.sheet_name,
        client=client,
        timeout_seconds=timeout,
    )
    return WaitlistDispatcher(
        spreadsheet=sheets,
        email_sink=build_email_sink(rules, settings, client),
        rate_limiter=limiter,
        duplicate_checker=DuplicateChecker(sheets),
        clock=clock,
        config=config,
    )
