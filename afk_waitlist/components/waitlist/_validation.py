"""
Validator and sanitizer for waitlist submissions.

Pure functions only: no I/O, no clock, no shared state.

Key behaviors:
- Email checks accumulate (format, length, typo) rather than short-circuit
- A recognised domain typo is reported as an error with a suggestion
- Location "Other" requires a custom location within length bounds
- Form errors keep email errors ahead of location errors
- sanitize() is idempotent
"""

from __future__ import annotations

import re

from afk_waitlist.components.waitlist.models import (
    DEFAULT_TYPO_DOMAINS,
    OTHER_LOCATION,
    Messages,
    SubmissionRequest,
    ValidationResult,
    WaitlistConfig,
)

# local@domain.tld, no whitespace, exactly one @ per part
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_DISALLOWED_CHARS = "<>\"'&"
DEFAULT_SANITIZE_MAX_LENGTH = 500

LA_COUNTY_CITIES: list[str] = [
    "Los Angeles",
]


# --- Email ---


def suggest_email(email: str, typo_domains: dict[str, str] | None = None) -> str | None:
    """
    Suggest a corrected address when the domain is a known misspelling.

    Args:
        email: Address as typed
        typo_domains: Mapping of misspelled domain to correct domain

    Returns:
        Corrected address, or None if the domain is not a known typo
    """
    if "@" not in email:
        return None

    domains = DEFAULT_TYPO_DOMAINS if typo_domains is None else typo_domains
    local, domain = email.split("@", 1)
    corrected = domains.get(domain.lower())
    if corrected is None:
        return None
    return f"{local}@{corrected}"


def validate_email(
    email: str,
    *,
    max_length: int = 254,
    typo_domains: dict[str, str] | None = None,
) -> ValidationResult:
    """
    Validate an email address.

    A syntactically valid address on a misspelled domain still fails:
    the user has to accept or correct the suggestion explicitly.
    """
    if not email:
        return ValidationResult.from_errors([Messages.EMAIL_REQUIRED])

    errors: list[str] = []

    if not EMAIL_REGEX.fullmatch(email):
        errors.append(Messages.EMAIL_INVALID)

    if len(email) > max_length:
        errors.append(Messages.EMAIL_TOO_LONG)

    suggestion = suggest_email(email, typo_domains)
    if suggestion:
        errors.append(Messages.EMAIL_TYPO.format(suggestion=suggestion))

    return ValidationResult.from_errors(errors)


# --- Location ---


def validate_location(
    location: str,
    custom_location: str | None = None,
    *,
    min_length: int = 2,
    max_length: int = 100,
) -> ValidationResult:
    """Validate the location selection and, for "Other", the free-text value."""
    if not location:
        return ValidationResult.from_errors([Messages.LOCATION_REQUIRED])

    if location != OTHER_LOCATION:
        return ValidationResult.from_errors([])

    custom = (custom_location or "").strip()
    if not custom:
        error = Messages.CUSTOM_LOCATION_MISSING
    elif len(custom) < min_length:
        error = Messages.CUSTOM_LOCATION_TOO_SHORT.format(min_length=min_length)
    elif len(custom) > max_length:
        error = Messages.CUSTOM_LOCATION_TOO_LONG
    else:
        return ValidationResult.from_errors([])

    return ValidationResult.from_errors([error])


def validate_form(
    request: SubmissionRequest,
    config: WaitlistConfig | None = None,
) -> ValidationResult:
    """Validate a whole submission: email errors first, then location errors."""
    cfg = config or WaitlistConfig()

    email_result = validate_email(
        request.email,
        max_length=cfg.email_max_length,
        typo_domains=cfg.typo_domains,
    )
    location_result = validate_location(
        request.location,
        request.custom_location,
        min_length=cfg.custom_location_min_length,
        max_length=cfg.custom_location_max_length,
    )
    return email_result.merge(location_result)


def is_la_county_location(location: str) -> bool:
    """Check if location is one of the launch-area cities (case-insensitive)."""
    needle = location.strip().lower()
    return any(city.lower() == needle for city in LA_COUNTY_CITIES)


# --- Sanitizer ---


def sanitize(
    text: str,
    *,
    max_length: int = DEFAULT_SANITIZE_MAX_LENGTH,
    disallowed_chars: str = DEFAULT_DISALLOWED_CHARS,
) -> str:
    """
    Strip disallowed characters, trim whitespace and truncate.

    Trimming happens after character removal and again after truncation,
    so sanitize(sanitize(x)) == sanitize(x).
    """
    if not text:
        return ""

    cleaned = text.translate({ord(c): None for c in disallowed_chars})
    cleaned = cleaned.strip()
    return cleaned[:max_length].rstrip()


def format_location(
    location: str,
    custom_location: str | None = None,
    config: WaitlistConfig | None = None,
) -> str:
    """Return the location to store: the custom value when "Other" is selected."""
    cfg = config or WaitlistConfig()
    value = custom_location if location == OTHER_LOCATION and custom_location else location
    return sanitize(
        value,
        max_length=cfg.sanitize_max_length,
        disallowed_chars=cfg.sanitize_disallowed_chars,
    )
