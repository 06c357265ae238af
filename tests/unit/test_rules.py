from pathlib import Path

import pytest

from afk_waitlist.components.waitlist import Transport
from afk_waitlist.rules.loader import load_rules
from afk_waitlist.rules.models import Rules


def test_load_project_rules(rules: Rules) -> None:
    assert rules.project.slug == "afk-friends-waitlist"
    assert rules.rate_limits.max_submissions == 3
    assert rules.rate_limits.window_seconds == 3600
    assert rules.dispatch.transport is Transport.MULTI_SINK
    assert rules.validation.typo_domains["gmial.com"] == "gmail.com"
    assert "http://localhost:3000" in rules.ops.cors_origins


def test_to_waitlist_config(rules: Rules) -> None:
    config = rules.to_waitlist_config()
    assert config.email_max_length == 254
    assert config.custom_location_min_length == 2
    assert config.custom_location_max_length == 100
    assert config.sanitize_max_length == 500
    assert config.sanitize_disallowed_chars == "<>\"'&"
    assert config.rate_limit_max_submissions == 3
    assert config.source_tag == "Waitlist Signup"


def test_minimal_rules_use_defaults(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("project:\n  slug: test\n  rules_version: '0.1'\n")

    rules = load_rules(path)

    assert rules.rate_limits.max_submissions == 3
    assert rules.dispatch.email_provider == "mailchimp"
    assert rules.dispatch.timeout_seconds == 10.0


def test_script_transport(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(
        "project:\n  slug: test\n  rules_version: '0.1'\n"
        "dispatch:\n  transport: script\n  script_exec_path: /run\n"
    )

    rules = load_rules(path)

    assert rules.dispatch.transport is Transport.SCRIPT
    assert rules.dispatch.script_exec_path == "/run"


def test_markdown_wrapped_rules_rejected(tmp_path: Path) -> None:
    path = tmp_path / "rules.md"
    path.write_text(
        "# Waitlist rules\n\n```yaml\nproject:\n  slug: fenced\n  rules_version: '2'\n```\n"
    )

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("project: [unclosed\n")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


def test_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("")

    with pytest.raises(ValueError, match="empty"):
        load_rules(path)


def test_schema_violation(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(
        "project:\n  slug: test\n  rules_version: '0.1'\nrate_limits:\n  window_seconds: 0\n"
    )

    with pytest.raises(ValueError, match="validation failed"):
        load_rules(path)


def test_missing_project_section(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("rate_limits:\n  max_submissions: 5\n")

    with pytest.raises(ValueError):
        load_rules(path)
