"""
Duplicate checker for waitlist submissions.

Fails open: any failure while fetching existing emails is logged and
reported as "not a duplicate". A missed duplicate is acceptable; blocking
a new signup because a lookup failed is not.
"""

from __future__ import annotations

import logging

from afk_waitlist.components.waitlist.ports import DuplicateLookupPort

logger = logging.getLogger(__name__)


class NullDuplicateLookup:
    """Lookup that knows no emails. Used when no store is configured."""

    async def fetch_emails(self) -> list[str]:
        return []


class StaticDuplicateLookup:
    """Lookup over a fixed list of emails (dev/testing)."""

    def __init__(self, emails: list[str] | None = None) -> None:
        self.emails = list(emails or [])

    async def fetch_emails(self) -> list[str]:
        return list(self.emails)


class DuplicateChecker:
    def __init__(self, lookup: DuplicateLookupPort | None = None) -> None:
        self._lookup = lookup if lookup is not None else NullDuplicateLookup()

    async def is_duplicate(self, email: str) -> bool:
        """Case-insensitive membership check against the full recipient list."""
        try:
            existing = await self._lookup.fetch_emails()
        except Exception:
            logger.warning("Duplicate check failed, allowing submission", exc_info=True)
            return False

        needle = email.strip().lower()
        return any(
            isinstance(candidate, str) and candidate.strip().lower() == needle
            for candidate in existing
        )
