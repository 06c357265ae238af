"""
Waitlist component - submission dispatcher.

Orchestrates a waitlist signup end to end and turns every result,
including failures, into a SubmissionOutcome.

Pipeline:
1. Required fields present
2. Form validation (all messages, joined by a space)
3. Sanitize email (lower-cased) and formatted location
4. Rate limit per caller identifier
5. Duplicate check (fail-open)
6. Dispatch: spreadsheet append and email subscribe, concurrently
7. Aggregate: spreadsheet result decides success

Invariants:
- No exception crosses WaitlistDispatcher.submit
- success is True only if the spreadsheet sink acknowledged
- The email sink never gates success
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable

from afk_waitlist.components.waitlist._duplicates import DuplicateChecker
from afk_waitlist.components.waitlist._rate_limit import FixedWindowRateLimiter, SystemClock
from afk_waitlist.components.waitlist._validation import format_location, sanitize, validate_form
from afk_waitlist.components.waitlist.models import (
    ConfigurationError,
    DuplicateEmailError,
    Messages,
    OutcomeCode,
    RateLimitedError,
    SinkResult,
    SubmissionOutcome,
    SubmissionRecord,
    SubmissionRequest,
    SubmissionValidationError,
    Transport,
    WaitlistConfig,
)
from afk_waitlist.components.waitlist.ports import (
    ClockPort,
    CombinedEndpointPort,
    EmailSinkPort,
    SpreadsheetSinkPort,
)

logger = logging.getLogger(__name__)

SPREADSHEET_SINK = "spreadsheet"
EMAIL_SINK = "email"
COMBINED_SINK = "combined"


# --- Pure Functions ---


def aggregate_outcome(
    sheet: SinkResult,
    email: SinkResult | None,
    *,
    sanitized_email: str,
    sanitized_location: str,
) -> SubmissionOutcome:
    """
    Combine sink results into one outcome.

    Args:
        sheet: Result from the system of record
        email: Result from the email-marketing sink (None if not used)
        sanitized_email: Email that was dispatched
        sanitized_location: Location that was dispatched

    Returns:
        SubmissionOutcome whose success mirrors the sheet result only
    """
    triggered = email.ok if email is not None else None

    if not sheet.ok:
        return SubmissionOutcome(
            success=False,
            message=Messages.SINK_FAILURE,
            code=OutcomeCode.SINK_FAILURE,
            email_sequence_triggered=triggered,
        )

    return SubmissionOutcome(
        success=True,
        message=Messages.SUCCESS,
        code=OutcomeCode.OK,
        email_sequence_triggered=triggered,
        email=sanitized_email,
        location=sanitized_location,
    )


class MissingEmailSink:
    """Placeholder used when no email-marketing provider is configured."""

    async def subscribe(self, email: str, location: str) -> SinkResult:
        return SinkResult.failure(EMAIL_SINK, "email sink not configured")


# --- Dispatcher ---


class WaitlistDispatcher:
    """
    Waitlist submission dispatcher.

    Owns its rate limiter and duplicate checker; sinks are injected.
    Use Transport.MULTI_SINK with a spreadsheet (and optional email) sink,
    or Transport.SCRIPT with a combined endpoint. The two never mix.
    """

    def __init__(
        self,
        *,
        spreadsheet: SpreadsheetSinkPort | None = None,
        email_sink: EmailSinkPort | None = None,
        combined: CombinedEndpointPort | None = None,
        rate_limiter: FixedWindowRateLimiter | None = None,
        duplicate_checker: DuplicateChecker | None = None,
        clock: ClockPort | None = None,
        config: WaitlistConfig | None = None,
        transport: Transport = Transport.MULTI_SINK,
    ) -> None:
        if transport is Transport.MULTI_SINK and spreadsheet is None:
            raise ValueError("multi_sink transport requires a spreadsheet sink")
        if transport is Transport.SCRIPT and combined is None:
            raise ValueError("script transport requires a combined endpoint")

        self.config = config or WaitlistConfig()
        self.transport = transport
        self._clock = clock if clock is not None else SystemClock()
        self._spreadsheet = spreadsheet
        self._email_sink = email_sink if email_sink is not None else MissingEmailSink()
        self._email_configured = email_sink is not None
        if transport is Transport.MULTI_SINK and not self._email_configured:
            logger.warning("No email sink configured; email sequences will not be triggered")
        self._combined = combined
        self.rate_limiter = rate_limiter or FixedWindowRateLimiter(
            clock=self._clock,
            max_submissions=self.config.rate_limit_max_submissions,
            window_seconds=self.config.rate_limit_window_seconds,
        )
        self.duplicate_checker = duplicate_checker or DuplicateChecker()

    async def submit(self, request: SubmissionRequest) -> SubmissionOutcome:
        """Run the pipeline. Never raises."""
        if not request.email or not request.location:
            return SubmissionOutcome.rejected(OutcomeCode.MISSING_FIELD, Messages.MISSING_FIELD)

        validation = validate_form(request, self.config)
        if not validation.is_valid:
            return SubmissionOutcome.rejected(OutcomeCode.VALIDATION, " ".join(validation.errors))

        try:
            return await self._dispatch(request)
        except SubmissionValidationError as e:
            return SubmissionOutcome.rejected(OutcomeCode.VALIDATION, str(e))
        except RateLimitedError:
            return SubmissionOutcome.rejected(OutcomeCode.RATE_LIMITED, Messages.RATE_LIMITED)
        except DuplicateEmailError as e:
            logger.info("Duplicate waitlist email rejected: %s", e.email)
            return SubmissionOutcome.rejected(
                OutcomeCode.DUPLICATE_EMAIL, Messages.DUPLICATE_EMAIL
            )
        except Exception:
            logger.exception(
                "Unexpected error in waitlist submission from %s", request.caller_identifier
            )
            return SubmissionOutcome.rejected(OutcomeCode.UNEXPECTED, Messages.UNEXPECTED)

    async def _dispatch(self, request: SubmissionRequest) -> SubmissionOutcome:
        cfg = self.config
        email = sanitize(
            request.email,
            max_length=cfg.sanitize_max_length,
            disallowed_chars=cfg.sanitize_disallowed_chars,
        ).lower()
        location = format_location(request.location, request.custom_location, cfg)
        if not email or not location:
            raise SubmissionValidationError([Messages.MISSING_FIELD])

        if not self.rate_limiter.check_and_consume(request.caller_identifier):
            raise RateLimitedError(request.caller_identifier)

        if await self.duplicate_checker.is_duplicate(email):
            raise DuplicateEmailError(email)

        if self.transport is Transport.SCRIPT:
            return await self._dispatch_combined(email, location)
        return await self._dispatch_sinks(email, location)

    async def _dispatch_sinks(self, email: str, location: str) -> SubmissionOutcome:
        spreadsheet = self._spreadsheet
        if spreadsheet is None:
            raise ConfigurationError(["multi_sink transport requires a spreadsheet sink"])

        record = SubmissionRecord(
            email=email,
            location=location,
            submitted_at=self._clock.now_utc(),
            source_tag=self.config.source_tag,
        )
        sheet_result, email_result = await asyncio.gather(
            _guarded(SPREADSHEET_SINK, spreadsheet.append(record)),
            _guarded(EMAIL_SINK, self._email_sink.subscribe(email, location)),
        )

        logger.info(
            "Waitlist submission for %s: sheet=%s email=%s",
            email,
            sheet_result.ok,
            email_result.ok,
        )
        if not sheet_result.ok:
            logger.warning("Sink %s failed: %s", sheet_result.sink, sheet_result.error)
        if not email_result.ok and self._email_configured:
            logger.warning("Sink %s failed: %s", email_result.sink, email_result.error)

        return aggregate_outcome(
            sheet_result,
            email_result,
            sanitized_email=email,
            sanitized_location=location,
        )

    async def _dispatch_combined(self, email: str, location: str) -> SubmissionOutcome:
        combined = self._combined
        if combined is None:
            raise ConfigurationError(["script transport requires a combined endpoint"])

        result = await _guarded(COMBINED_SINK, combined.submit(email, location))
        logger.info("Waitlist submission for %s: combined=%s", email, result.ok)
        if not result.ok:
            logger.warning("Sink %s failed: %s", result.sink, result.error)

        return aggregate_outcome(
            result,
            None,
            sanitized_email=email,
            sanitized_location=location,
        )


async def _guarded(sink: str, call: Awaitable[SinkResult]) -> SinkResult:
    """Await a sink call, turning a stray exception into a failed SinkResult."""
    try:
        return await call
    except Exception as e:
        logger.warning("Sink %s raised %s", sink, type(e).__name__, exc_info=True)
        return SinkResult.failure(sink, str(e) or type(e).__name__)


# --- Entry Point ---


async def submit(
    email: str,
    location: str,
    custom_location: str | None = None,
    caller_identifier: str = "unknown",
    *,
    dispatcher: WaitlistDispatcher,
) -> SubmissionOutcome:
    """
    Main component entry point.

    Args:
        email: Email as typed
        location: Selected location ("Other" for free text)
        custom_location: Free-text location when "Other" is selected
        caller_identifier: Rate limit key (IP address or session)
        dispatcher: Configured dispatcher (Required)

    Returns:
        SubmissionOutcome
    """
    request = SubmissionRequest(
        email=email,
        location=location,
        custom_location=custom_location,
        caller_identifier=caller_identifier,
    )
    return await dispatcher.submit(request)
