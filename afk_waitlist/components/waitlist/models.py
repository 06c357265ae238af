"""
Waitlist component models.

Data models for the waitlist submission pipeline.

Lifecycle:
- SubmissionRequest: built per form submission, discarded after dispatch
- RateLimitEntry: one per caller identifier, owned by the rate limit store
- SubmissionRecord: the row appended to the spreadsheet sink
- SubmissionOutcome: returned to the caller, never persisted
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

# --- Constants ---

OTHER_LOCATION = "Other"
DEFAULT_SOURCE_TAG = "Waitlist Signup"

DEFAULT_TYPO_DOMAINS: dict[str, str] = {
    "gmial.com": "gmail.com",
    "gmai.com": "gmail.com",
    "yahooo.com": "yahoo.com",
    "hotmial.com": "hotmail.com",
}


# --- User-visible messages ---


class Messages:
    """Fixed, human-readable messages surfaced to the form."""

    EMAIL_REQUIRED = "Email is required"
    EMAIL_INVALID = "Please enter a valid email address"
    EMAIL_TOO_LONG = "Email address is too long"
    EMAIL_TYPO = "Did you mean {suggestion}?"

    LOCATION_REQUIRED = "Location is required"
    CUSTOM_LOCATION_MISSING = "Please specify your location"
    CUSTOM_LOCATION_TOO_SHORT = "Location must be at least {min_length} characters"
    CUSTOM_LOCATION_TOO_LONG = "Location is too long"

    MISSING_FIELD = "Email and location are required"
    RATE_LIMITED = "Too many submissions. Please try again later."
    DUPLICATE_EMAIL = "This email is already on our waitlist!"
    SUCCESS = "Successfully added to waitlist!"
    SINK_FAILURE = "Unable to process your request. Please try again."
    UNEXPECTED = "An unexpected error occurred. Please try again."


class OutcomeCode(str, Enum):
    """Machine-readable classification of a submission outcome."""

    OK = "ok"
    MISSING_FIELD = "missing_field"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    DUPLICATE_EMAIL = "duplicate_email"
    SINK_FAILURE = "sink_failure"
    UNEXPECTED = "unexpected"


class Transport(str, Enum):
    """Deployment transport for submissions."""

    MULTI_SINK = "multi_sink"  # Sheets append + email-marketing subscribe
    SCRIPT = "script"  # Single combined "exec" endpoint (legacy deployment)


# --- Input Models ---


@dataclass(frozen=True)
class SubmissionRequest:
    """A single waitlist form submission."""

    email: str
    location: str
    custom_location: str | None = None
    caller_identifier: str = "unknown"  # IP address or session key


# --- Value Models ---


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of one or more validation checks.

    Errors keep insertion order; they are displayed to the user joined
    together, so the order is part of the contract.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> ValidationResult:
        return cls(is_valid=len(errors) == 0, errors=list(errors))

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Concatenate errors, self first."""
        return ValidationResult.from_errors([*self.errors, *other.errors])


@dataclass
class RateLimitEntry:
    """Fixed-window counter for one caller identifier."""

    count: int
    window_start: datetime


@dataclass(frozen=True)
class SubmissionRecord:
    """Row appended to the spreadsheet sink."""

    email: str
    location: str
    submitted_at: datetime
    source_tag: str = DEFAULT_SOURCE_TAG

    def as_row(self) -> list[str]:
        """Column order: email, location, timestamp, source tag."""
        return [
            self.email,
            self.location,
            self.submitted_at.isoformat(),
            self.source_tag,
        ]


@dataclass(frozen=True)
class SinkResult:
    """Explicit success/failure value returned by every sink call."""

    ok: bool
    sink: str
    error: str | None = None

    @classmethod
    def success(cls, sink: str) -> SinkResult:
        return cls(ok=True, sink=sink)

    @classmethod
    def failure(cls, sink: str, error: str) -> SinkResult:
        return cls(ok=False, sink=sink, error=error)


# --- Output Models ---


@dataclass(frozen=True)
class SubmissionOutcome:
    """Uniform result of a submission; the only thing callers ever see."""

    success: bool
    message: str
    code: OutcomeCode = OutcomeCode.OK
    email_sequence_triggered: bool | None = None
    email: str | None = None  # Sanitized email, present on success
    location: str | None = None  # Sanitized location, present on success

    @classmethod
    def rejected(cls, code: OutcomeCode, message: str) -> SubmissionOutcome:
        return cls(success=False, message=message, code=code)


# --- Configuration ---


@dataclass(frozen=True)
class WaitlistConfig:
    """Waitlist pipeline configuration."""

    email_max_length: int = 254
    custom_location_min_length: int = 2
    custom_location_max_length: int = 100
    typo_domains: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TYPO_DOMAINS))

    sanitize_max_length: int = 500
    sanitize_disallowed_chars: str = "<>\"'&"

    rate_limit_max_submissions: int = 3
    rate_limit_window_seconds: int = 3600

    source_tag: str = DEFAULT_SOURCE_TAG


# --- Error Types ---


class WaitlistError(Exception):
    """Base waitlist error."""

    pass


class SubmissionValidationError(WaitlistError):
    """User-correctable input problem; messages are surfaced verbatim."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(" ".join(self.errors))


class RateLimitedError(WaitlistError):
    """Caller exceeded the submission ceiling for the current window."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Rate limit exceeded for {identifier}")


class DuplicateEmailError(WaitlistError):
    """Email is already present in the system of record."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Duplicate email: {email}")


class SinkFailureError(WaitlistError):
    """An external sink was unreachable or rejected the call."""

    def __init__(self, sink: str, reason: str) -> None:
        self.sink = sink
        self.reason = reason
        super().__init__(f"Sink '{sink}' failed: {reason}")


class ConfigurationError(WaitlistError):
    """A mandatory configuration value is missing or malformed."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))
