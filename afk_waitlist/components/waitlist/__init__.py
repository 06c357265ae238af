"""
Waitlist component.

Email/location waitlist signup: validation, sanitization, rate limiting,
duplicate detection and multi-sink dispatch.
"""

from afk_waitlist.components.waitlist._duplicates import (
    DuplicateChecker,
    NullDuplicateLookup,
    StaticDuplicateLookup,
)
from afk_waitlist.components.waitlist._rate_limit import (
    FixedWindowRateLimiter,
    InMemoryRateLimitStore,
    SystemClock,
)
from afk_waitlist.components.waitlist._validation import (
    EMAIL_REGEX,
    LA_COUNTY_CITIES,
    format_location,
    is_la_county_location,
    sanitize,
    suggest_email,
    validate_email,
    validate_form,
    validate_location,
)
from afk_waitlist.components.waitlist.component import (
    WaitlistDispatcher,
    aggregate_outcome,
    submit,
)
from afk_waitlist.components.waitlist.models import (
    DEFAULT_TYPO_DOMAINS,
    OTHER_LOCATION,
    ConfigurationError,
    DuplicateEmailError,
    Messages,
    OutcomeCode,
    RateLimitedError,
    RateLimitEntry,
    SinkFailureError,
    SinkResult,
    SubmissionOutcome,
    SubmissionRecord,
    SubmissionRequest,
    SubmissionValidationError,
    Transport,
    ValidationResult,
    WaitlistConfig,
    WaitlistError,
)
from afk_waitlist.components.waitlist.ports import (
    ClockPort,
    CombinedEndpointPort,
    DuplicateLookupPort,
    EmailSinkPort,
    RateLimitStorePort,
    SpreadsheetSinkPort,
)

__all__ = [
    # Component
    "submit",
    "WaitlistDispatcher",
    "aggregate_outcome",
    # Pure functions
    "validate_email",
    "validate_location",
    "validate_form",
    "suggest_email",
    "sanitize",
    "format_location",
    "is_la_county_location",
    # Services
    "FixedWindowRateLimiter",
    "InMemoryRateLimitStore",
    "SystemClock",
    "DuplicateChecker",
    "NullDuplicateLookup",
    "StaticDuplicateLookup",
    # Constants
    "EMAIL_REGEX",
    "LA_COUNTY_CITIES",
    "DEFAULT_TYPO_DOMAINS",
    "OTHER_LOCATION",
    "Messages",
    # Models
    "SubmissionRequest",
    "ValidationResult",
    "RateLimitEntry",
    "SubmissionRecord",
    "SubmissionOutcome",
    "SinkResult",
    "OutcomeCode",
    "Transport",
    "WaitlistConfig",
    # Errors
    "WaitlistError",
    "SubmissionValidationError",
    "RateLimitedError",
    "DuplicateEmailError",
    "SinkFailureError",
    "ConfigurationError",
    # Ports
    "ClockPort",
    "RateLimitStorePort",
    "DuplicateLookupPort",
    "SpreadsheetSinkPort",
    "EmailSinkPort",
    "CombinedEndpointPort",
]
