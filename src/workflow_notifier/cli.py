"""CLI entry point, run as the action's step.

Usage:
    workflow-notifier
    workflow-notifier --event-path event.json --dry-run
    python -m workflow_notifier.cli --env-file .env.local

Inputs come from INPUT_* environment variables and the event from the
GITHUB_* variables the runner sets. Any exception fails the step: the
message is written as a GitHub Actions error annotation and the process
exits with status 1.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from dotenv import find_dotenv, load_dotenv

from workflow_notifier.config import load_config
from workflow_notifier.context.event import load_event_context
from workflow_notifier.context.github import GitHubClient
from workflow_notifier.logging_config import get_logger, setup_logging
from workflow_notifier.notifier import Notifier
from workflow_notifier.webhook import MockWebhookClient, SlackWebhookClient

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Send a Slack notification for a GitHub Actions workflow run"
    )
    parser.add_argument(
        "--event-path",
        default=None,
        help="Path to the event payload JSON (defaults to GITHUB_EVENT_PATH)",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Load environment variables from this file first (default: .env if present)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the message as JSON instead of posting it",
    )
    return parser


async def notify(event_path: str | None = None, dry_run: bool = False) -> dict:
    """Load configuration and context, then send one notification.

    Args:
        event_path: Event payload file overriding GITHUB_EVENT_PATH
        dry_run: Record the message instead of posting it and skip
                 the commit lookup

    Returns:
        The payload that was sent (or would have been)
    """
    config, secrets = load_config()
    context = load_event_context(event_path=event_path)

    webhook = MockWebhookClient() if dry_run else SlackWebhookClient(secrets.webhook_url)
    # A dry run stays offline; fields missing from the event render empty
    github = None if dry_run else GitHubClient(token=secrets.github_token)

    notifier = Notifier(config, context, webhook, github=github)
    return await notifier.run()


def main(argv: list[str] | None = None) -> int:
    """Run the notifier and translate failures into a failed step."""
    args = build_parser().parse_args(argv)
    load_dotenv(args.env_file or find_dotenv(usecwd=True), override=False)
    setup_logging()

    try:
        payload = asyncio.run(notify(event_path=args.event_path, dry_run=args.dry_run))
    except Exception as e:
        logger.error("notification_failed", error=str(e), exc_info=True)
        print(f"::error::{e}")
        return 1

    if args.dry_run:
        print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
