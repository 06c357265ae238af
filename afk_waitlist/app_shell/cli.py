import argparse
import asyncio
import logging
import sys

from afk_waitlist.app_shell.config import Settings, validate_environment
from afk_waitlist.app_shell.wiring import build_dispatcher
from afk_waitlist.components.waitlist import (
    ConfigurationError,
    SubmissionOutcome,
    SubmissionRequest,
)
from afk_waitlist.rules.loader import load_rules
from afk_waitlist.rules.models import Rules

logger = logging.getLogger("cli")


def get_rules(settings: Settings) -> Rules:
    try:
        return load_rules(settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Rules load failed: %s", e)
        sys.exit(1)


def handle_check_config(settings: Settings, args: argparse.Namespace) -> int:
    rules = get_rules(settings)
    problems = validate_environment(rules, settings)
    if problems:
        for problem in problems:
            logger.error(problem)
        return 1

    print("Configuration validated.")
    return 0


def print_outcome(outcome: SubmissionOutcome) -> None:
    status = "OK" if outcome.success else "FAILED"
    print(f"{status}: {outcome.message}")
    if outcome.email_sequence_triggered is not None:
        print(f"Email sequence triggered: {outcome.email_sequence_triggered}")


def handle_submit(settings: Settings, args: argparse.Namespace) -> int:
    rules = get_rules(settings)
    try:
        dispatcher = build_dispatcher(rules, settings)
    except ConfigurationError as e:
        for problem in e.problems:
            logger.error(problem)
        return 1

    request = SubmissionRequest(
        email=args.email,
        location=args.location,
        custom_location=args.custom_location,
        caller_identifier=args.identifier,
    )
    outcome = asyncio.run(dispatcher.submit(request))
    print_outcome(outcome)
    return 0 if outcome.success else 1


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="AFK Friends waitlist CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # submit
    submit_parser = subparsers.add_parser("submit", help="Submit one waitlist signup")
    submit_parser.add_argument("email", help="Email address")
    submit_parser.add_argument("location", help="City, or 'Other'")
    submit_parser.add_argument("--custom-location", help="City when location is 'Other'")
    submit_parser.add_argument(
        "--identifier", default="cli", help="Rate limit identifier (default: cli)"
    )

    # check-config
    subparsers.add_parser("check-config", help="Validate rules and environment")

    args = parser.parse_args(argv)
    settings = Settings.from_env()

    if args.command == "submit":
        sys.exit(handle_submit(settings, args))
    elif args.command == "check-config":
        sys.exit(handle_check_config(settings, args))


if __name__ == "__main__":
    main()
