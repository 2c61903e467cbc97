"""Tests for council/registry.py."""

import random

import pytest

from config.config_loader import ConfigError
from council.registry import ParticipantNotFoundError, ParticipantRegistry, participant_from_config
from tests.conftest import make_participant


def test_get_known_participant(registry):
    econ = registry.get("economist")
    assert econ.name == "EconAgent"
    assert econ.role == "AI Economist"


def test_get_unknown_raises_typed_not_found(registry):
    with pytest.raises(ParticipantNotFoundError) as info:
        registry.get("astrologer")
    assert info.value.participant_id == "astrologer"
    assert "astrologer" in str(info.value)
    # Still a KeyError for callers that treat it as a mapping miss
    assert isinstance(info.value, KeyError)


def test_find_returns_none_for_unknown(registry):
    assert registry.find("astrologer") is None
    assert registry.find(None) is None
    assert registry.find("legal").name == "JusticeAdvocate"


def test_all_is_ordered_and_idempotent(registry):
    first = registry.all()
    second = registry.all()
    assert first == second
    assert [s.id for s in first] == ["economist", "activist", "historian", "policy", "legal", "educator", "currency"]
    assert set(first[0].to_dict()) == {"id", "name", "role", "specialty", "avatar", "persona"}


def test_contains_and_len(registry):
    assert "policy" in registry
    assert "astrologer" not in registry
    assert len(registry) == 7


def test_participant_from_config_copies_lists(sample_participant_config):
    participant = participant_from_config(sample_participant_config)
    assert participant.expertise == ("Sovereign money systems",)
    assert participant.fallbacks == ("Econ fallback",)
    sample_participant_config.expertise.append("Mutated later")
    assert participant.expertise == ("Sovereign money systems",)


def test_empty_registry_is_fatal():
    with pytest.raises(ConfigError):
        ParticipantRegistry([])


def test_duplicate_ids_are_rejected():
    with pytest.raises(ConfigError, match="Duplicate"):
        ParticipantRegistry([make_participant("economist"), make_participant("economist")])


def test_empty_fallback_catalog_is_rejected():
    with pytest.raises(ConfigError, match="fallback"):
        ParticipantRegistry([make_participant("economist", fallbacks=())])


def test_random_other_than_never_returns_excluded(registry):
    rng = random.Random(7)
    picks = {registry.random_other_than("economist", rng=rng).id for _ in range(200)}
    assert "economist" not in picks
    assert len(picks) > 1


def test_random_other_than_is_seedable(registry):
    first = [registry.random_other_than("policy", rng=random.Random(3)).id for _ in range(5)]
    second = [registry.random_other_than("policy", rng=random.Random(3)).id for _ in range(5)]
    assert first == second


def test_random_other_than_single_participant_returns_it():
    solo = ParticipantRegistry([make_participant("economist")])
    assert solo.random_other_than("economist").id == "economist"


def test_random_other_than_without_exclusion():
    pair = ParticipantRegistry([make_participant("economist"), make_participant("legal")])
    assert pair.random_other_than(None).id in {"economist", "legal"}
