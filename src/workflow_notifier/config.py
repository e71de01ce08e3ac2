"""Configuration surface: action inputs and secrets.

GitHub Actions hands `with:` inputs to the step as INPUT_<NAME>
environment variables and secrets as whatever `env:` names the workflow
maps them to. This module reads both, normalises the inputs into a
NotificationConfig, and fails fast on anything that would make sending
impossible:
- GITHUB_TOKEN missing
- SLACK_WEBHOOK_URL missing
- status missing or not one of success/failure/cancelled/custom

For local runs the CLI loads a .env file first (python-dotenv), so the
same variables can live there.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from workflow_notifier.logging_config import get_logger
from workflow_notifier.schemas import NotificationConfig, Status

logger = get_logger(__name__)

INPUT_NAMES = (
    "status",
    "mention",
    "author_name",
    "if_mention",
    "text",
    "username",
    "icon_emoji",
    "icon_url",
    "channel",
    "custom_payload",
    "fields",
)


class ConfigurationError(ValueError):
    """Required configuration is missing or invalid."""


class Secrets(BaseModel):
    """Credentials needed to run; never logged.

    Attributes:
        github_token: Token for the GitHub API
        webhook_url: Slack incoming webhook URL
    """

    model_config = ConfigDict(frozen=True)

    github_token: str
    webhook_url: str


def get_input(env: Mapping[str, str], name: str, required: bool = False) -> str:
    """Read an action input the way the runner exposes it.

    Args:
        env: Environment mapping
        name: Input name as written in the workflow file
        required: Raise if the input is empty

    Returns:
        The trimmed input value ("" when unset)
    """
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    value = env.get(key, "").strip()
    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


def load_secrets(env: Mapping[str, str]) -> Secrets:
    """Read the GitHub token and webhook URL.

    Raises:
        ConfigurationError: If either is missing or empty
    """
    token = env.get("GITHUB_TOKEN", "")
    if not token:
        raise ConfigurationError("Specify secrets.GITHUB_TOKEN")
    webhook_url = env.get("SLACK_WEBHOOK_URL", "")
    if not webhook_url:
        raise ConfigurationError("Specify secrets.SLACK_WEBHOOK_URL")
    return Secrets(github_token=token, webhook_url=webhook_url)


def parse_status(value: str) -> Status:
    try:
        return Status(value.lower())
    except ValueError:
        raise ConfigurationError(
            "You can specify success or failure or cancelled or custom"
        ) from None


def load_config(
    env: Mapping[str, str] | None = None,
) -> tuple[NotificationConfig, Secrets]:
    """Load and validate everything the notifier needs.

    Args:
        env: Environment mapping. Defaults to os.environ.

    Returns:
        The normalised notification config and the secrets

    Raises:
        ConfigurationError: On a missing input or secret, or an unknown status
    """
    env = os.environ if env is None else env

    inputs = {name: get_input(env, name) for name in INPUT_NAMES}
    inputs["status"] = get_input(env, "status", required=True).lower()
    inputs["if_mention"] = inputs["if_mention"].lower()
    logger.info("inputs_loaded", **inputs, actor=env.get("GITHUB_ACTOR", ""))

    secrets = load_secrets(env)
    status = parse_status(inputs.pop("status"))

    config = NotificationConfig(status=status, **inputs)
    return config, secrets
