"""Pydantic models for everything that flows through the notifier.

Three groups of models live here:
- Configuration: the action inputs, after normalisation
- Event context: the immutable snapshot of the triggering workflow event
- Slack message: the payload posted to the incoming webhook

Key design decisions:
- Enums constrain categorical inputs (status, mention triggers)
- The event payload is a tagged union resolved once when the context is
  built, so field accessors never dig through raw JSON
- Missing event data becomes empty strings, not None, because every
  value ends up interpolated into Slack mrkdwn
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Status(str, Enum):
    """Outcome of the workflow run the message reports on.

    CUSTOM bypasses the message builder and posts the user's own payload.
    """

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    CUSTOM = "custom"


class MentionTrigger(str, Enum):
    """Outcomes on which the configured mention is prepended.

    ALWAYS matches every outcome, NONE matches nothing.
    """

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    ALWAYS = "always"
    NONE = "none"


class FieldName(str, Enum):
    """Selector names accepted by the `fields` input.

    ACTION selects the field rendered as "Workflow"; external workflow
    files already depend on the selector being called "action".
    """

    REPO = "repo"
    COMMIT = "commit"
    REF = "ref"
    EVENT_NAME = "eventName"
    ACTION = "action"


DEFAULT_FIELDS: frozenset[str] = frozenset({FieldName.REPO.value, FieldName.COMMIT.value})


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class NotificationConfig(BaseModel):
    """User-supplied settings for one notification.

    String inputs are accepted as they arrive from the workflow file and
    normalised here: `fields` and `if_mention` are comma-separated lists.

    Attributes:
        status: Outcome to report, or CUSTOM for a raw payload
        mention: Comma-separated Slack user ids, or "here"/"channel"
        if_mention: Outcomes that trigger the mention
        author_name: Attachment author; defaults to the workflow actor
        username: Bot display name override
        icon_emoji: Bot icon emoji override
        icon_url: Bot icon URL override
        channel: Channel override
        fields: Selected field names (see FieldName)
        text: Custom text replacing the default status line
        custom_payload: Raw payload used verbatim when status is CUSTOM
    """

    model_config = ConfigDict(frozen=True)

    status: Status
    mention: str = ""
    if_mention: frozenset[MentionTrigger] = frozenset()
    author_name: str = ""
    username: str = ""
    icon_emoji: str = ""
    icon_url: str = ""
    channel: str = ""
    fields: frozenset[str] = DEFAULT_FIELDS
    text: str = ""
    custom_payload: str = ""

    @field_validator("if_mention", mode="before")
    @classmethod
    def parse_triggers(cls, value: Any) -> Any:
        """Split a comma-separated trigger list, dropping unknown names."""
        if isinstance(value, str):
            value = value.lower().split(",")
        known = {t.value for t in MentionTrigger}
        triggers = set()
        for item in value:
            name = item.value if isinstance(item, MentionTrigger) else str(item).strip()
            if name in known:
                triggers.add(name)
        return frozenset(triggers)

    @field_validator("fields", mode="before")
    @classmethod
    def parse_fields(cls, value: Any) -> Any:
        """Split a comma-separated selector list; empty input means the defaults.

        Input that only holds separators (",") selects nothing.
        """
        if isinstance(value, str):
            value = value.replace(" ", "")
            if not value:
                return DEFAULT_FIELDS
            value = value.split(",")
        if value is None:
            return DEFAULT_FIELDS
        return frozenset(
            item.value if isinstance(item, FieldName) else item for item in value if item
        )

    def includes(self, name: FieldName) -> bool:
        return name.value in self.fields

    def mentions_on(self, outcome: MentionTrigger) -> bool:
        return outcome in self.if_mention or MentionTrigger.ALWAYS in self.if_mention


# ---------------------------------------------------------------------------
# Event Context
# ---------------------------------------------------------------------------


class RepositoryInfo(BaseModel):
    """Repository identity as shown in the Repo field.

    Attributes:
        url: Browsable repository URL
        full_name: "owner/name"
    """

    model_config = ConfigDict(frozen=True)

    url: str = ""
    full_name: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class CommitInfo(BaseModel):
    """A single commit as referenced by the event.

    Attributes:
        url: Link to the commit page
        message: Full commit message, unnormalised
    """

    model_config = ConfigDict(frozen=True)

    url: str = ""
    message: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class _PayloadBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    repository: RepositoryInfo = Field(default_factory=RepositoryInfo)
    compare: str = ""

    @property
    def commit(self) -> CommitInfo | None:
        return None


class HeadCommitPayload(_PayloadBase):
    """Push-style event that names its head commit."""

    kind: Literal["head_commit"] = "head_commit"
    head_commit: CommitInfo

    @property
    def commit(self) -> CommitInfo | None:
        return self.head_commit


class CommitListPayload(_PayloadBase):
    """Event carrying a list of commits but no head commit."""

    kind: Literal["commit_list"] = "commit_list"
    commits: tuple[CommitInfo, ...] = Field(..., min_length=1)

    @property
    def commit(self) -> CommitInfo | None:
        return self.commits[0]


class BarePayload(_PayloadBase):
    """Event without commit data (pull_request, schedule, workflow_dispatch...)."""

    kind: Literal["bare"] = "bare"


EventPayload = Annotated[
    Union[HeadCommitPayload, CommitListPayload, BarePayload],
    Field(discriminator="kind"),
]


class EventContext(BaseModel):
    """Immutable snapshot of the event that triggered the workflow.

    Attributes:
        event_name: Webhook event name (e.g., "push", "pull_request")
        sha: Commit SHA the workflow ran on
        ref: Branch or tag ref (e.g., "refs/heads/main")
        workflow: Workflow display name
        actor: Login of the user who triggered the run
        payload: Resolved event payload
    """

    model_config = ConfigDict(frozen=True)

    event_name: str = ""
    sha: str = ""
    ref: str = ""
    workflow: str = ""
    actor: str = ""
    payload: EventPayload = Field(default_factory=BarePayload)


# ---------------------------------------------------------------------------
# Slack Message
# ---------------------------------------------------------------------------


class MessageField(BaseModel):
    """One line item of the attachment (Repo, Commit, Diff, ...)."""

    title: str
    value: str
    short: bool = True


class Attachment(BaseModel):
    """The single attachment carrying the color band, author and fields."""

    color: str
    author_name: str
    author_link: str
    author_icon: str
    fields: list[MessageField] = Field(default_factory=list)


class OutgoingMessage(BaseModel):
    """Incoming-webhook payload built by the message builder.

    Attributes:
        text: Top-level message text (mention prefix + status line)
        username: Bot display name override
        icon_emoji: Bot icon emoji override
        icon_url: Bot icon URL override
        channel: Channel override
        attachments: Exactly one attachment
    """

    text: str
    username: str = ""
    icon_emoji: str = ""
    icon_url: str = ""
    channel: str = ""
    attachments: list[Attachment] = Field(default_factory=list)


class CustomPayload(BaseModel):
    """Schema a custom payload must satisfy before it is posted.

    Only the keys the notifier knows about are type-checked; everything
    else is passed through to Slack untouched.
    """

    model_config = ConfigDict(extra="allow")

    text: str | None = None
    username: str | None = None
    icon_emoji: str | None = None
    icon_url: str | None = None
    channel: str | None = None
    attachments: list[dict[str, Any]] | None = None
    blocks: list[dict[str, Any]] | None = None

    @model_validator(mode="after")
    def check_has_content(self) -> "CustomPayload":
        """Slack rejects messages with nothing to display."""
        if not self.text and not self.attachments and not self.blocks:
            raise ValueError(
                "Custom payload must define at least one of: text, attachments, blocks"
            )
        return self
