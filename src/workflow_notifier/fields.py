"""Field accessors for the Slack attachment.

Each accessor renders one optional line item (Repo, Ref, Workflow, Event,
Commit, Diff) from the event context, or returns None when its selector
is not part of the configured `fields`. Missing event data never raises:
the affected value is rendered with empty strings instead.

Two selector quirks are existing behaviour that workflow files rely on:
- Diff is gated by the "commit" selector, not a selector of its own,
  and only appears for events that carry a compare URL
- Workflow is gated by the "action" selector
"""

from __future__ import annotations

import re

from workflow_notifier.schemas import (
    EventContext,
    FieldName,
    MessageField,
    NotificationConfig,
)

_LINE_BREAKS = re.compile(r"[\r\n]+")
_WHITESPACE_RUNS = re.compile(r"\s\s+")


def normalize_message(message: str) -> str:
    """Collapse a commit message onto one line.

    >>> normalize_message("fix bug\\n\\n  also  cleanup")
    'fix bug also cleanup'
    """
    message = _LINE_BREAKS.sub(" ", message)
    message = _WHITESPACE_RUNS.sub(" ", message)
    return message.strip()


def link(url: str, label: str) -> str:
    """Slack mrkdwn link: <url|label>."""
    return f"<{url}|{label}>"


class FieldExtractor:
    """Renders the optional attachment fields for one notification.

    Usage:
        extractor = FieldExtractor(context, config)
        fields = extractor.fields()
    """

    def __init__(self, context: EventContext, config: NotificationConfig) -> None:
        self.context = context
        self.config = config

    def repo(self) -> MessageField | None:
        if not self.config.includes(FieldName.REPO):
            return None

        repository = self.context.payload.repository
        return MessageField(title="Repo", value=link(repository.url, repository.full_name))

    def commit(self) -> MessageField | None:
        if not self.config.includes(FieldName.COMMIT):
            return None

        sha = self.context.sha[:8]
        commit = self.context.payload.commit
        url = commit.url if commit else ""
        message = normalize_message(commit.message) if commit else ""
        return MessageField(title="Commit", value=link(url, f"{sha}... {message}"))

    def diff(self) -> MessageField | None:
        # Only comparison-style events (push) carry a compare URL
        url = self.context.payload.compare
        if not self.config.includes(FieldName.COMMIT) or not url:
            return None

        commits = url[url.rfind("/") + 1 :]
        return MessageField(title="Diff", value=link(url, commits))

    def event_name(self) -> MessageField | None:
        if not self.config.includes(FieldName.EVENT_NAME):
            return None

        return MessageField(title="Event", value=self.context.event_name)

    def ref(self) -> MessageField | None:
        if not self.config.includes(FieldName.REF):
            return None

        return MessageField(title="Ref", value=self.context.ref)

    def workflow(self) -> MessageField | None:
        if not self.config.includes(FieldName.ACTION):
            return None

        commit = self.context.payload.commit
        url = commit.url if commit else ""
        return MessageField(
            title="Workflow", value=link(f"{url}/checks", self.context.workflow)
        )

    def fields(self) -> list[MessageField]:
        """All selected fields in canonical order, absent ones dropped."""
        candidates = [
            self.repo(),
            self.ref(),
            self.workflow(),
            self.event_name(),
            self.commit(),
            self.diff(),
        ]
        return [field for field in candidates if field is not None]
