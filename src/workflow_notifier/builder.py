"""Message builder for the success/failure/cancelled notifications.

The builder turns an EventContext plus the user's NotificationConfig into
an OutgoingMessage:
1. Pick the color band for the outcome
2. Prepend the @mention if the outcome triggers it
3. Use the custom text, or the default status line for the outcome
4. Attach the author block and the selected fields

The custom status never reaches the builder; see notifier.py.
"""

from __future__ import annotations

from workflow_notifier.fields import FieldExtractor
from workflow_notifier.schemas import (
    Attachment,
    EventContext,
    MentionTrigger,
    NotificationConfig,
    OutgoingMessage,
    Status,
)

GROUP_MENTIONS = ("here", "channel")

SUCCESS_TEXT = ":white_check_mark: Succeeded GitHub Actions\n"
FAILURE_TEXT = ":no_entry: Failed GitHub Actions\n"
CANCELLED_TEXT = ":warning: Canceled GitHub Actions\n"


def resolve_text(default_text: str, custom_text: str) -> str:
    """Custom text replaces the default line outright when non-empty."""
    return custom_text if custom_text else default_text


def render_mention(target: str) -> str:
    """Render a mention target as Slack mention tokens.

    "here"/"channel" (any case) become a broadcast mention; anything else
    is treated as a comma-separated list of user ids.
    """
    normalized = target.replace(" ", "")
    if normalized.lower() in GROUP_MENTIONS:
        return f"<!{normalized.lower()}> "
    user_ids = [user_id for user_id in normalized.split(",") if user_id]
    if not user_ids:
        return ""
    return " ".join(f"<@{user_id}>" for user_id in user_ids) + " "


class MessageBuilder:
    """Builds the OutgoingMessage for one workflow outcome.

    Usage:
        builder = MessageBuilder(context, config)
        message = builder.build_success(config.text)
    """

    def __init__(self, context: EventContext, config: NotificationConfig) -> None:
        self.context = context
        self.config = config
        self.extractor = FieldExtractor(context, config)

    @property
    def author_name(self) -> str:
        return self.config.author_name or self.context.actor

    def build_success(self, text: str = "") -> OutgoingMessage:
        return self._build("good", MentionTrigger.SUCCESS, resolve_text(SUCCESS_TEXT, text))

    def build_failure(self, text: str = "") -> OutgoingMessage:
        return self._build("danger", MentionTrigger.FAILURE, resolve_text(FAILURE_TEXT, text))

    def build_cancelled(self, text: str = "") -> OutgoingMessage:
        return self._build(
            "warning", MentionTrigger.CANCELLED, resolve_text(CANCELLED_TEXT, text)
        )

    def build(self, status: Status, text: str = "") -> OutgoingMessage:
        """Dispatch to the builder for `status`.

        Raises:
            ValueError: If status is CUSTOM (custom payloads are not built)
        """
        if status is Status.SUCCESS:
            return self.build_success(text)
        if status is Status.FAILURE:
            return self.build_failure(text)
        if status is Status.CANCELLED:
            return self.build_cancelled(text)
        raise ValueError(f"No message template for status {status.value!r}")

    def mention_prefix(self, target: str, outcome: MentionTrigger) -> str:
        """Mention tokens to prepend for `outcome`, or "" if not triggered."""
        if not self.config.mentions_on(outcome):
            return ""
        return render_mention(target)

    def _build(self, color: str, outcome: MentionTrigger, line: str) -> OutgoingMessage:
        author = self.author_name
        attachment = Attachment(
            color=color,
            author_name=author,
            author_link=f"https://github.com/{author}",
            author_icon=f"https://github.com/{author}.png?size=32",
            fields=self.extractor.fields(),
        )
        return OutgoingMessage(
            text=self.mention_prefix(self.config.mention, outcome) + line,
            username=self.config.username,
            icon_emoji=self.config.icon_emoji,
            icon_url=self.config.icon_url,
            channel=self.config.channel,
            attachments=[attachment],
        )
