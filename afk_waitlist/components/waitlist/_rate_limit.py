"""
Fixed-window rate limiter for waitlist submissions.

One counter per caller identifier. The window opens on the first request
and resets once it is older than window_seconds; bursts straddling a window
boundary are accepted.

Invariants:
- count never exceeds max_submissions inside an unexpired window
- a rejected request does not increment the counter
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from threading import Lock

from afk_waitlist.components.waitlist.models import RateLimitEntry
from afk_waitlist.components.waitlist.ports import ClockPort, RateLimitStorePort

logger = logging.getLogger(__name__)


class SystemClock:
    """Production clock."""

    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class InMemoryRateLimitStore:
    """
    In-memory rate limit store.

    Bounded: once max_entries identifiers are tracked, the entry with the
    oldest window is evicted to make room for a new identifier.
    """

    def __init__(self, max_entries: int = 10_000) -> None:
        self.max_entries = max_entries
        self._entries: dict[str, RateLimitEntry] = {}

    def get(self, identifier: str) -> RateLimitEntry | None:
        return self._entries.get(identifier)

    def put(self, identifier: str, entry: RateLimitEntry) -> None:
        if identifier not in self._entries and len(self._entries) >= self.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k].window_start)
            del self._entries[oldest]
        self._entries[identifier] = entry

    def delete(self, identifier: str) -> None:
        self._entries.pop(identifier, None)

    def items(self) -> Iterator[tuple[str, RateLimitEntry]]:
        return iter(list(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Drop all entries (for test isolation)."""
        self._entries.clear()


class FixedWindowRateLimiter:
    def __init__(
        self,
        store: RateLimitStorePort | None = None,
        clock: ClockPort | None = None,
        *,
        max_submissions: int = 3,
        window_seconds: int = 3600,
        sweep_every: int = 1000,
    ):
        self._store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock if clock is not None else SystemClock()
        self.max_submissions = max_submissions
        self.window = timedelta(seconds=window_seconds)
        self.sweep_every = sweep_every
        self._checks = 0
        self._lock = Lock()

    def _expired(self, entry: RateLimitEntry, now: datetime) -> bool:
        return now - entry.window_start > self.window

    def check_and_consume(self, identifier: str) -> bool:
        """
        Check if a submission is allowed.
        If allowed, counts it and returns True.
        If denied, returns False and leaves the counter untouched.
        """
        if self.max_submissions <= 0:
            return False

        with self._lock:
            now = self._clock.now_utc()
            self._checks += 1
            if self.sweep_every > 0 and self._checks % self.sweep_every == 0:
                self._sweep(now)

            entry = self._store.get(identifier)
            if entry is None or self._expired(entry, now):
                self._store.put(identifier, RateLimitEntry(count=1, window_start=now))
                return True

            if entry.count >= self.max_submissions:
                logger.info("Rate limit hit for identifier %s", identifier)
                return False

            self._store.put(
                identifier,
                RateLimitEntry(count=entry.count + 1, window_start=entry.window_start),
            )
            return True

    def _sweep(self, now: datetime) -> int:
        expired = [key for key, entry in self._store.items() if self._expired(entry, now)]
        for key in expired:
            self._store.delete(key)
        if expired:
            logger.debug("Swept %d expired rate limit entries", len(expired))
        return len(expired)

    def sweep(self) -> int:
        """Evict entries whose window has expired. Returns number evicted."""
        with self._lock:
            return self._sweep(self._clock.now_utc())

    def remaining(self, identifier: str) -> int:
        """Submissions left for identifier in its current window."""
        with self._lock:
            entry = self._store.get(identifier)
            if entry is None or self._expired(entry, self._clock.now_utc()):
                return self.max_submissions
            return max(self.max_submissions - entry.count, 0)
