import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from afk_waitlist.components.waitlist.models import Transport
from afk_waitlist.rules.models import Rules

EMAIL_PROVIDERS = ("mailchimp", "convertkit")
TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Credentials and deployment settings read from the environment."""

    rules_path: Path
    dev_sinks: bool = False

    google_sheets_api_key: str | None = None
    google_spreadsheet_id: str | None = None

    email_provider: str | None = None
    mailchimp_api_key: str | None = None
    mailchimp_list_id: str | None = None
    mailchimp_server_prefix: str = "us1"
    convertkit_api_key: str | None = None
    convertkit_form_id: str | None = None

    script_url: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            rules_path=Path(env.get("WAITLIST_RULES_PATH", "rules.yaml")),
            dev_sinks=env.get("WAITLIST_DEV_SINKS", "").lower() in TRUTHY,
            google_sheets_api_key=env.get("GOOGLE_SHEETS_API_KEY") or None,
            google_spreadsheet_id=env.get("GOOGLE_SPREADSHEET_ID") or None,
            email_provider=env.get("EMAIL_PROVIDER") or None,
            mailchimp_api_key=env.get("MAILCHIMP_API_KEY") or None,
            mailchimp_list_id=env.get("MAILCHIMP_LIST_ID") or None,
            mailchimp_server_prefix=env.get("MAILCHIMP_SERVER_PREFIX") or "us1",
            convertkit_api_key=env.get("CONVERTKIT_API_KEY") or None,
            convertkit_form_id=env.get("CONVERTKIT_FORM_ID") or None,
            script_url=env.get("WAITLIST_SCRIPT_URL") or None,
        )

    def resolved_email_provider(self, rules: Rules) -> str:
        return (self.email_provider or rules.dispatch.email_provider).lower()


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_environment(
    rules: Rules,
    settings: Settings,
    env: Mapping[str, str] | None = None,
) -> list[str]:
    """
    Collect every configuration problem. An empty list means valid.
    """
    env = os.environ if env is None else env
    problems: list[str] = []

    # 1. Explicitly required env
    missing = [name for name in rules.ops.required_env if not env.get(name)]
    if missing:
        problems.append(f"Missing required environment variables: {', '.join(missing)}")

    # Dev sinks need no credentials
    if settings.dev_sinks:
        return problems

    # 2. Transport-specific credentials
    if rules.dispatch.transport is Transport.SCRIPT:
        if not settings.script_url:
            problems.append("WAITLIST_SCRIPT_URL is required for the script transport")
        elif not _is_http_url(settings.script_url):
            problems.append(f"WAITLIST_SCRIPT_URL is not a valid http(s) URL: {settings.script_url}")
        return problems

    if not settings.google_sheets_api_key:
        problems.append("Missing required environment variable: GOOGLE_SHEETS_API_KEY")
    if not settings.google_spreadsheet_id:
        problems.append("Missing required environment variable: GOOGLE_SPREADSHEET_ID")

    # 3. Email provider
    provider = settings.resolved_email_provider(rules)
    if provider not in EMAIL_PROVIDERS:
        problems.append(
            f"Unknown email provider '{provider}' (expected one of: {', '.join(EMAIL_PROVIDERS)})"
        )
    elif provider == "mailchimp":
        if not settings.mailchimp_api_key or not settings.mailchimp_list_id:
            problems.append("Mailchimp requires MAILCHIMP_API_KEY and MAILCHIMP_LIST_ID")
    elif not settings.convertkit_api_key or not settings.convertkit_form_id:
        problems.append("ConvertKit requires CONVERTKIT_API_KEY and CONVERTKIT_FORM_ID")

    return problems


def validate_ops_rules(
    rules: Rules,
    settings: Settings,
    env: Mapping[str, str] | None = None,
) -> None:
    """
    Validate operational requirements before startup.
    Exits the process with status 1 on any problem.
    """
    problems = validate_environment(rules, settings, env)
    if problems:
        for problem in problems:
            print(f"CRITICAL: {problem}", file=sys.stderr)
        sys.exit(1)

    print("Configuration Validated.")
