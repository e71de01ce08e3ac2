"""Top-level dispatcher for one notification.

The notifier follows this flow:
1. For the custom status, validate the user's payload and send it as-is
2. Otherwise, look up the commit if the event carried none and a field
   needs it (best effort)
3. Build the message for the outcome
4. Hand it to the webhook client

Everything here runs once per process; nothing is retried.
"""

from __future__ import annotations

from typing import Any

import httpx

from workflow_notifier.builder import MessageBuilder
from workflow_notifier.context.event import attach_commit
from workflow_notifier.context.github import CommitLookupProtocol
from workflow_notifier.custom import parse_custom_payload
from workflow_notifier.logging_config import get_logger
from workflow_notifier.schemas import (
    EventContext,
    FieldName,
    NotificationConfig,
    Status,
)
from workflow_notifier.webhook import WebhookClientProtocol

logger = get_logger(__name__)


class Notifier:
    """Composes and sends the notification for one workflow run.

    Usage:
        notifier = Notifier(config, context, SlackWebhookClient(url))
        await notifier.run()
    """

    def __init__(
        self,
        config: NotificationConfig,
        context: EventContext,
        webhook: WebhookClientProtocol,
        github: CommitLookupProtocol | None = None,
    ) -> None:
        """Initialize the notifier with its collaborators.

        Args:
            config: Normalised action inputs
            context: Snapshot of the triggering event
            webhook: Transport the message is delivered through
            github: Commit lookup for events without commit data.
                    Lookup is skipped when None.
        """
        self.config = config
        self.context = context
        self.webhook = webhook
        self.github = github

    def _needs_commit(self) -> bool:
        if self.context.payload.commit is not None:
            return False
        return self.config.includes(FieldName.COMMIT) or self.config.includes(
            FieldName.ACTION
        )

    async def resolve_context(self) -> EventContext:
        """Return the context, with its commit filled in when possible.

        A failed lookup is logged and leaves the context unchanged; the
        affected fields then render with empty links.
        """
        repo = self.context.payload.repository.full_name
        if self.github is None or not self._needs_commit() or not repo or not self.context.sha:
            return self.context

        try:
            commit = await self.github.get_commit(repo, self.context.sha)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning(
                "commit_lookup_failed",
                repo=repo,
                sha=self.context.sha,
                error=str(e),
            )
            return self.context

        logger.info("commit_lookup_complete", repo=repo, sha=self.context.sha)
        return attach_commit(self.context, commit)

    async def compose(self) -> dict[str, Any]:
        """Produce the JSON message for the configured status."""
        if self.config.status is Status.CUSTOM:
            return parse_custom_payload(self.config.custom_payload)

        context = await self.resolve_context()
        message = MessageBuilder(context, self.config).build(
            self.config.status, self.config.text
        )
        logger.info(
            "message_built",
            status=self.config.status.value,
            color=message.attachments[0].color,
            fields=[f.title for f in message.attachments[0].fields],
        )
        return message.model_dump()

    async def run(self) -> dict[str, Any]:
        """Compose the message and deliver it.

        Returns:
            The payload that was sent

        Raises:
            ConfigurationError: If the custom payload is invalid
            DeliveryError: If the webhook rejects the message
            httpx.HTTPError: If the webhook request fails
        """
        payload = await self.compose()
        await self.webhook.send(payload)
        logger.info("notification_sent", status=self.config.status.value)
        return payload
