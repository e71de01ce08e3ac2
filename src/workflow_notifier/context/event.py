"""Event context loader for the GitHub Actions runner environment.

GitHub Actions describes the triggering event through a handful of
GITHUB_* environment variables plus a JSON file holding the full webhook
payload (GITHUB_EVENT_PATH). This module reads both once at startup and
freezes them into an EventContext.

The raw payload is open-ended, so it is resolved here into one of three
shapes the notifier actually cares about:
- head_commit: the payload names a head commit (push)
- commit_list: the payload only lists commits
- bare: no commit data at all (pull_request, schedule, workflow_dispatch)

Field accessors then work against that tagged union instead of probing
raw JSON each time.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from workflow_notifier.logging_config import get_logger
from workflow_notifier.schemas import (
    BarePayload,
    CommitInfo,
    CommitListPayload,
    EventContext,
    HeadCommitPayload,
    RepositoryInfo,
)

logger = get_logger(__name__)


def _repository(raw: Mapping[str, Any]) -> RepositoryInfo:
    repo = raw.get("repository") or {}
    # Non-push payloads carry the API URL in "url"; html_url is the browsable one
    return RepositoryInfo(
        url=repo.get("html_url") or repo.get("url"),
        full_name=repo.get("full_name"),
    )


def _commit(raw: Mapping[str, Any]) -> CommitInfo:
    return CommitInfo(url=raw.get("url"), message=raw.get("message"))


def resolve_payload(
    raw: Mapping[str, Any],
) -> HeadCommitPayload | CommitListPayload | BarePayload:
    """Resolve a raw webhook payload into its tagged variant.

    Args:
        raw: The decoded event JSON (may be empty)

    Returns:
        The payload variant matching the commit data present
    """
    repository = _repository(raw)
    compare = raw.get("compare") or ""

    head = raw.get("head_commit")
    if isinstance(head, Mapping):
        return HeadCommitPayload(
            repository=repository, compare=compare, head_commit=_commit(head)
        )

    commits = raw.get("commits")
    if isinstance(commits, list):
        resolved = tuple(_commit(c) for c in commits if isinstance(c, Mapping))
        if resolved:
            return CommitListPayload(
                repository=repository, compare=compare, commits=resolved
            )

    return BarePayload(repository=repository, compare=compare)


def read_event_payload(path: str | Path | None) -> dict[str, Any]:
    """Read the webhook payload JSON written by the runner.

    A missing path or file yields an empty payload, mirroring how the
    runner behaves for events it cannot serialise.

    Raises:
        ValueError: If the file exists but does not hold a JSON object
    """
    if not path:
        logger.warning("event_payload_missing", reason="GITHUB_EVENT_PATH not set")
        return {}

    event_path = Path(path)
    if not event_path.exists():
        logger.warning("event_payload_missing", path=str(event_path))
        return {}

    try:
        data = json.loads(event_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid event payload in {event_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Event payload in {event_path} is not a JSON object")
    return data


def load_event_context(
    env: Mapping[str, str] | None = None,
    event_path: str | Path | None = None,
) -> EventContext:
    """Build the EventContext from the runner environment.

    Args:
        env: Environment mapping. Defaults to os.environ.
        event_path: Payload file, overriding GITHUB_EVENT_PATH.

    Returns:
        The frozen event context
    """
    env = os.environ if env is None else env
    raw = read_event_payload(event_path or env.get("GITHUB_EVENT_PATH"))

    context = EventContext(
        event_name=env.get("GITHUB_EVENT_NAME", ""),
        sha=env.get("GITHUB_SHA", ""),
        ref=env.get("GITHUB_REF", ""),
        workflow=env.get("GITHUB_WORKFLOW", ""),
        actor=env.get("GITHUB_ACTOR", ""),
        payload=resolve_payload(raw),
    )
    logger.info(
        "event_context_loaded",
        event_name=context.event_name,
        ref=context.ref,
        sha=context.sha,
        payload_kind=context.payload.kind,
        repository=context.payload.repository.full_name,
    )
    return context


def attach_commit(context: EventContext, commit: CommitInfo) -> EventContext:
    """Return a copy of `context` whose payload names `commit` as its head.

    Used when the commit was looked up separately because the event
    payload carried none.
    """
    payload = HeadCommitPayload(
        repository=context.payload.repository,
        compare=context.payload.compare,
        head_commit=commit,
    )
    return context.model_copy(update={"payload": payload})
