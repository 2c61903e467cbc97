"""Tests for council/models.py dataclasses."""

import dataclasses

import pytest

from council.models import ConversationContext, HistoryEntry, ModerationResult, RawCompletion, Reply
from tests.conftest import make_participant


def test_participant_is_frozen():
    p = make_participant()
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.name = "Other"  # type: ignore[misc]


def test_participant_summary_fields():
    summary = make_participant("historian").summary()
    assert summary.to_dict() == {
        "id": "historian",
        "name": "HistorianBot",
        "role": "AI Historian",
        "specialty": "Historian Studies",
        "avatar": "H",
        "persona": "Analytical, data-driven",
    }


def test_conversation_context_defaults():
    ctx = ConversationContext()
    assert ctx.topic is None
    assert ctx.key_points == []
    assert ctx.mode == "discussion"


def test_history_entry_optional_timestamp():
    entry = HistoryEntry(author="User", content="Hello")
    assert entry.timestamp is None


def test_raw_completion_optional_token_count():
    raw = RawCompletion(provider="gemini", model="gemini-2.0-flash", content="Hi", latency_sec=0.9, token_count=None)
    assert raw.token_count is None


def test_reply_defaults_to_not_fallback():
    assert Reply(text="ok", participant_id="economist").fallback is False


def test_moderation_result_defaults():
    result = ModerationResult(approved=True)
    assert result.reasons == []
    assert result.severity == "low"
    assert result.fallback is False
