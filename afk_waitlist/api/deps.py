from functools import lru_cache

from fastapi import Depends

from afk_waitlist.app_shell.config import Settings
from afk_waitlist.app_shell.wiring import build_dispatcher, build_rate_limiter
from afk_waitlist.components.waitlist import FixedWindowRateLimiter, WaitlistDispatcher
from afk_waitlist.rules.loader import load_rules
from afk_waitlist.rules.models import Rules


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# Rate limit state is process-wide: one limiter shared by every request
_rate_limiter_instance: FixedWindowRateLimiter | None = None


def get_rate_limiter(rules: Rules = Depends(get_rules)) -> FixedWindowRateLimiter:
    """Get rate limiter singleton."""
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        _rate_limiter_instance = build_rate_limiter(rules)
    return _rate_limiter_instance


# Dispatcher singleton (dev sinks keep their rows in memory)
_dispatcher_instance: WaitlistDispatcher | None = None


def get_dispatcher(
    rules: Rules = Depends(get_rules),
    settings: Settings = Depends(get_settings),
    rate_limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> WaitlistDispatcher:
    """Get dispatcher singleton."""
    global _dispatcher_instance
    if _dispatcher_instance is None:
        _dispatcher_instance = build_dispatcher(rules, settings, rate_limiter=rate_limiter)
    return _dispatcher_instance


def reset_singletons() -> None:
    """Drop cached singletons (for test isolation)."""
    global _rate_limiter_instance, _dispatcher_instance
    _rate_limiter_instance = None
    _dispatcher_instance = None
    get_settings.cache_clear()
    get_rules.cache_clear()
