"""Tests for the Pydantic schemas.

These tests verify that the models:
- Normalise comma-separated inputs (fields, if_mention)
- Apply the repo,commit default when no fields are selected
- Keep the event context immutable
- Enforce the custom payload schema

Run with: pytest tests/test_schemas.py -v
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from workflow_notifier.schemas import (
    DEFAULT_FIELDS,
    BarePayload,
    CommitInfo,
    CustomPayload,
    EventContext,
    FieldName,
    HeadCommitPayload,
    MentionTrigger,
    NotificationConfig,
    RepositoryInfo,
    Status,
)


# ---------------------------------------------------------------------------
# NotificationConfig
# ---------------------------------------------------------------------------


class TestNotificationConfig:
    """Tests for input normalisation on NotificationConfig."""

    def test_fields_default_to_repo_and_commit(self) -> None:
        config = NotificationConfig(status=Status.SUCCESS, fields="")
        assert config.fields == DEFAULT_FIELDS
        assert config.includes(FieldName.REPO)
        assert config.includes(FieldName.COMMIT)
        assert not config.includes(FieldName.REF)

    def test_fields_default_when_omitted(self) -> None:
        config = NotificationConfig(status=Status.SUCCESS)
        assert config.fields == frozenset({"repo", "commit"})

    def test_whitespace_only_fields_use_defaults(self) -> None:
        config = NotificationConfig(status=Status.SUCCESS, fields="   ")
        assert config.fields == DEFAULT_FIELDS

    @pytest.mark.parametrize("raw", [",", " , ,"])
    def test_separator_only_fields_select_nothing(self, raw: str) -> None:
        config = NotificationConfig(status=Status.SUCCESS, fields=raw)
        assert config.fields == frozenset()
        assert not any(config.includes(name) for name in FieldName)

    def test_fields_ignore_spaces(self) -> None:
        config = NotificationConfig(status=Status.SUCCESS, fields=" repo, ref ,eventName")
        assert config.fields == frozenset({"repo", "ref", "eventName"})

    def test_fields_accept_enum_members(self) -> None:
        config = NotificationConfig(
            status=Status.SUCCESS, fields=[FieldName.ACTION, FieldName.REF]
        )
        assert config.includes(FieldName.ACTION)
        assert config.includes(FieldName.REF)

    def test_unknown_field_is_kept_but_never_matches(self) -> None:
        config = NotificationConfig(status=Status.SUCCESS, fields="workflow")
        assert not any(config.includes(name) for name in FieldName)

    def test_if_mention_parses_comma_list(self) -> None:
        config = NotificationConfig(status=Status.FAILURE, if_mention="Failure, cancelled")
        assert config.if_mention == frozenset(
            {MentionTrigger.FAILURE, MentionTrigger.CANCELLED}
        )

    def test_if_mention_drops_unknown_values(self) -> None:
        config = NotificationConfig(status=Status.FAILURE, if_mention="sometimes,failure")
        assert config.if_mention == frozenset({MentionTrigger.FAILURE})

    def test_mentions_on_matching_outcome(self) -> None:
        config = NotificationConfig(status=Status.FAILURE, if_mention="failure")
        assert config.mentions_on(MentionTrigger.FAILURE)
        assert not config.mentions_on(MentionTrigger.SUCCESS)

    def test_mentions_on_always(self) -> None:
        config = NotificationConfig(status=Status.SUCCESS, if_mention="always")
        for outcome in (
            MentionTrigger.SUCCESS,
            MentionTrigger.FAILURE,
            MentionTrigger.CANCELLED,
        ):
            assert config.mentions_on(outcome)

    def test_none_trigger_never_mentions(self) -> None:
        config = NotificationConfig(status=Status.SUCCESS, if_mention="none")
        assert not config.mentions_on(MentionTrigger.SUCCESS)

    def test_invalid_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            NotificationConfig(status="skipped")


# ---------------------------------------------------------------------------
# Event Context
# ---------------------------------------------------------------------------


class TestEventContext:
    """Tests for the event context models."""

    def test_defaults_to_bare_payload(self) -> None:
        context = EventContext()
        assert isinstance(context.payload, BarePayload)
        assert context.payload.commit is None
        assert context.payload.compare == ""

    def test_context_is_frozen(self) -> None:
        context = EventContext(sha="abc")
        with pytest.raises(ValidationError):
            context.sha = "def"

    def test_null_values_become_empty_strings(self) -> None:
        commit = CommitInfo(url=None, message=None)
        assert commit.url == ""
        assert commit.message == ""
        repo = RepositoryInfo(url=None, full_name=None)
        assert repo.full_name == ""

    def test_payload_validates_from_tagged_dict(self) -> None:
        context = EventContext.model_validate(
            {
                "sha": "abc",
                "payload": {
                    "kind": "head_commit",
                    "head_commit": {"url": "https://x/commit/abc", "message": "m"},
                },
            }
        )
        assert isinstance(context.payload, HeadCommitPayload)
        assert context.payload.commit == CommitInfo(url="https://x/commit/abc", message="m")


# ---------------------------------------------------------------------------
# CustomPayload
# ---------------------------------------------------------------------------


class TestCustomPayload:
    """Tests for the custom payload schema."""

    def test_accepts_text_only(self) -> None:
        payload = CustomPayload.model_validate({"text": "hello"})
        assert payload.text == "hello"

    def test_preserves_unknown_keys(self) -> None:
        payload = CustomPayload.model_validate({"text": "hi", "unfurl_links": False})
        assert payload.model_dump()["unfurl_links"] is False

    def test_rejects_empty_payload(self) -> None:
        with pytest.raises(ValidationError, match="at least one of"):
            CustomPayload.model_validate({"channel": "#ci"})

    def test_rejects_non_list_attachments(self) -> None:
        with pytest.raises(ValidationError):
            CustomPayload.model_validate({"attachments": "not a list"})

    def test_rejects_non_string_text(self) -> None:
        with pytest.raises(ValidationError):
            CustomPayload.model_validate({"text": {"nested": True}})
