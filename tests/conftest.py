from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import httpx
import pytest

from afk_waitlist.app_shell.config import Settings
from afk_waitlist.rules.loader import load_rules
from afk_waitlist.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class FakeClock:
    """Deterministic clock for testing."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def rules_path() -> Path:
    """The real rules file at the project root."""
    path = PROJECT_ROOT / "rules.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Rules not found at {path}")
    return path


@pytest.fixture
def rules(rules_path: Path) -> Rules:
    return load_rules(rules_path)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def dev_settings(rules_path: Path) -> Settings:
    """Settings that wire the in-memory dev sinks."""
    return Settings(rules_path=rules_path, dev_sinks=True)


@pytest.fixture
def production_env(rules_path: Path) -> dict[str, str]:
    """Complete credentials for the default multi-sink transport."""
    return {
        "WAITLIST_RULES_PATH": str(rules_path),
        "GOOGLE_SHEETS_API_KEY": "sheets-key",
        "GOOGLE_SPREADSHEET_ID": "sheet123",
        "MAILCHIMP_API_KEY": "mc-key",
        "MAILCHIMP_LIST_ID": "list1",
        "MAILCHIMP_SERVER_PREFIX": "us21",
    }


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by a handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
