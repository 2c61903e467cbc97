"""Participant roster: built once from configuration, read-only afterwards."""

import logging
import random
from collections.abc import Iterable, Iterator

from config.config_loader import ConfigError, ParticipantConfig
from council.models import Participant, ParticipantSummary

logger = logging.getLogger(__name__)


class ParticipantNotFoundError(KeyError):
    """Raised when a participant id is not registered."""

    def __init__(self, participant_id: str) -> None:
        self.participant_id = participant_id
        super().__init__(participant_id)

    def __str__(self) -> str:
        return f"Participant with ID {self.participant_id!r} not found"


def participant_from_config(cfg: ParticipantConfig) -> Participant:
    return Participant(
        id=cfg.id,
        name=cfg.name,
        role=cfg.role,
        specialty=cfg.specialty,
        avatar=cfg.avatar,
        persona=cfg.persona,
        expertise=tuple(cfg.expertise),
        response_styles=tuple(cfg.response_styles),
        fallbacks=tuple(cfg.fallbacks),
        follow_up_fallbacks=tuple(cfg.follow_up_fallbacks),
    )


class ParticipantRegistry:
    """Ordered, immutable roster of specialist participants.

    Usage:
        registry = ParticipantRegistry.from_config(config.participants)
        econ = registry.get("economist")
        other = registry.random_other_than("economist")
    """

    def __init__(self, participants: Iterable[Participant]) -> None:
        ordered: dict[str, Participant] = {}
        for participant in participants:
            if participant.id in ordered:
                raise ConfigError(f"Duplicate participant id: {participant.id}")
            if not participant.fallbacks or not participant.follow_up_fallbacks:
                raise ConfigError(f"Participant '{participant.id}' has an empty fallback catalog")
            ordered[participant.id] = participant
        if not ordered:
            raise ConfigError("Participant registry is empty")
        self._participants = ordered
        logger.debug("Registered participants: %s", list(ordered))

    @classmethod
    def from_config(cls, configs: Iterable[ParticipantConfig]) -> "ParticipantRegistry":
        return cls(participant_from_config(c) for c in configs)

    def __len__(self) -> int:
        return len(self._participants)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._participants

    def __iter__(self) -> Iterator[Participant]:
        return iter(self._participants.values())

    @property
    def ids(self) -> list[str]:
        return list(self._participants)

    def get(self, participant_id: str) -> Participant:
        """Return the participant or raise ParticipantNotFoundError."""
        try:
            return self._participants[participant_id]
        except KeyError:
            raise ParticipantNotFoundError(participant_id) from None

    def find(self, participant_id: str | None) -> Participant | None:
        if participant_id is None:
            return None
        return self._participants.get(participant_id)

    def all(self) -> list[ParticipantSummary]:
        """Public summaries in configuration order."""
        return [p.summary() for p in self._participants.values()]

    def random_other_than(self, exclude_id: str | None, rng: random.Random | None = None) -> Participant:
        """Pick uniformly among participants other than ``exclude_id``.

        When the excluded participant is the only one registered it is
        returned anyway, since the exclusion cannot be satisfied.
        """
        chooser = rng or random
        participants = list(self._participants.values())
        eligible = [p for p in participants if p.id != exclude_id]
        if not eligible:
            return participants[0]
        return chooser.choice(eligible)
