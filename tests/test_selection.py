"""Tests for council/selection.py."""

import pytest

from config.config_loader import ConfigError
from council.models import ConversationContext, ScoreTable
from council.registry import ParticipantRegistry
from council.selection import SelectionEngine
from tests.conftest import make_participant


def _scores(result) -> dict[str, float]:
    return {s.participant_id: s.score for s in result.scores}


def test_policy_message_selects_policy(engine):
    result = engine.select("What policy changes would help with this legislation?", ConversationContext())
    assert result.participant_id == "policy"
    assert result.reason == "keywords"
    assert result.score >= 3.0
    assert _scores(result)["economist"] == 0.0


def test_history_message_selects_historian(engine):
    result = engine.select("Tell me about the history of cooperatives", ConversationContext())
    assert result.participant_id == "historian"
    assert result.score >= 1.0


def test_no_keywords_defaults_to_economist(engine):
    result = engine.select("hi", ConversationContext())
    assert result.participant_id == "economist"
    assert result.reason == "default"
    assert all(s.score == 0.0 for s in result.scores)


def test_select_is_deterministic(engine):
    ctx = ConversationContext(topic="housing-justice")
    message = "How should tenants organize against rent hikes before the court date?"
    results = [engine.select(message, ctx) for _ in range(5)]
    assert all(r == results[0] for r in results)


def test_topic_multiplier_applied_before_ranking(engine):
    message = "Inflation sparked the protest movement"

    plain = engine.select(message, ConversationContext())
    assert plain.participant_id == "activist"
    assert _scores(plain)["economist"] < _scores(plain)["activist"]

    boosted = engine.select(message, ConversationContext(topic="monetary-reform"))
    assert boosted.participant_id == "economist"
    assert _scores(boosted)["economist"] == pytest.approx(_scores(plain)["economist"] * 2.0)


def test_unknown_topic_uses_unit_multiplier(engine):
    message = "Inflation sparked the protest movement"
    plain = engine.select(message, ConversationContext())
    other = engine.select(message, ConversationContext(topic="no-such-topic"))
    assert plain.scores == other.scores


def test_word_boundary_bonus(engine):
    # "bank" as a whole word earns the bonus, inside "banking" it does not
    assert engine.raw_score("economist", "the bank") == pytest.approx(1.5)
    assert engine.raw_score("economist", "banking") == pytest.approx(1.0)


def test_keyword_counts_once(engine):
    assert engine.raw_score("economist", "bank bank bank") == pytest.approx(1.5)


def test_matching_is_case_insensitive(engine):
    assert engine.raw_score("legal", "COURT") == pytest.approx(1.5)


def test_scores_listed_in_priority_order(engine):
    result = engine.select("hi", ConversationContext())
    assert [s.participant_id for s in result.scores] == [
        "historian", "activist", "policy", "legal", "educator", "currency", "economist",
    ]


def test_interrogative_low_confidence_prefers_educator(engine):
    result = engine.select("Why?", ConversationContext())
    assert result.participant_id == "educator"
    assert result.reason == "interrogative"


def test_modal_low_confidence_prefers_activist(engine):
    result = engine.select("We ought to do something", ConversationContext())
    assert result.participant_id == "activist"
    assert result.reason == "modal"


def test_interrogative_checked_before_modal(engine):
    result = engine.select("Who should go?", ConversationContext())
    assert result.participant_id == "educator"


def test_topic_heuristic_for_legal_and_policy(engine):
    assert engine.select("hi", ConversationContext(topic="legal")).participant_id == "legal"
    assert engine.select("hi", ConversationContext(topic="policy")).participant_id == "policy"


def test_confident_keyword_score_skips_heuristics(engine):
    # Interrogative opener, but "history" scores 1.5
    result = engine.select("What is the history here?", ConversationContext())
    assert result.participant_id == "historian"
    assert result.reason == "keywords"


# --- custom engines ---


def _registry(*ids: str) -> ParticipantRegistry:
    return ParticipantRegistry([make_participant(pid) for pid in ids])


def test_ties_broken_by_priority_not_table_order():
    registry = _registry("economist", "policy")
    tables = [
        ScoreTable("economist", (("money", 1.0),)),
        ScoreTable("policy", (("money", 1.0),)),
    ]
    first = SelectionEngine(registry, tables, priority=["policy", "economist"])
    second = SelectionEngine(registry, list(reversed(tables)), priority=["economist", "policy"])
    assert first.select("money", ConversationContext()).participant_id == "policy"
    assert second.select("money", ConversationContext()).participant_id == "economist"


def test_modal_falls_back_to_policy_without_activist():
    registry = _registry("economist", "policy")
    engine = SelectionEngine(registry, [], priority=["policy", "economist"])
    result = engine.select("You must vote", ConversationContext())
    assert result.participant_id == "policy"


def test_interrogative_without_educator_falls_through():
    registry = _registry("economist", "policy")
    engine = SelectionEngine(registry, [], priority=["policy", "economist"])
    assert engine.select("How?", ConversationContext()).participant_id == "economist"


def test_default_without_economist_uses_top_ranked():
    registry = _registry("historian", "legal")
    engine = SelectionEngine(registry, [], priority=["legal", "historian"])
    result = engine.select("hi", ConversationContext())
    assert result.participant_id == "legal"
    assert result.reason == "default"


def test_custom_min_confidence():
    registry = _registry("economist", "historian")
    tables = [ScoreTable("historian", (("past", 1.0),))]
    engine = SelectionEngine(registry, tables, priority=["historian", "economist"], min_confidence=5.0)
    assert engine.select("the past", ConversationContext()).participant_id == "economist"


def test_unknown_ids_in_tables_are_rejected():
    registry = _registry("economist")
    with pytest.raises(ConfigError, match="ghost"):
        SelectionEngine(registry, [ScoreTable("ghost", (("x", 1.0),))], priority=["economist"])


def test_unknown_ids_in_multipliers_are_rejected():
    registry = _registry("economist")
    with pytest.raises(ConfigError, match="ghost"):
        SelectionEngine(registry, [], priority=["economist"], topic_multipliers={"t": {"ghost": 2.0}})


def test_priority_must_cover_every_participant():
    registry = _registry("economist", "legal")
    with pytest.raises(ConfigError, match="legal"):
        SelectionEngine(registry, [], priority=["economist"])
