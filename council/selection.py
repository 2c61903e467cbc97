"""Pick the participant best suited to answer a message.

Scoring:
  1. Keyword matching: every keyword in a participant's score table that
     appears in the lower-cased message adds its weight, plus a word bonus
     when it matches on word boundaries. Each keyword counts once.
  2. Topic multipliers: when the context names a topic with a multiplier
     map, each participant's raw score is scaled (default 1.0).
  3. Ranking: highest score wins; ties go to the earlier id in the declared
     priority list.

Short messages rarely carry enough keywords, so a best score under the
minimum confidence falls through ordered heuristics: interrogative opener
-> educator, obligation language -> activist (then policy), a "legal" or
"policy" topic -> that participant, otherwise the economist.
"""

import logging
import re
from collections.abc import Mapping, Sequence

from config.config_loader import ConfigError, SelectionConfig
from council.models import ConversationContext, ParticipantScore, ScoreTable, SelectionResult
from council.registry import ParticipantRegistry

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONFIDENCE = 1.0
DEFAULT_WORD_BONUS = 0.5

_INTERROGATIVE = re.compile(r"^\s*(?:(?:what|how|why|when|where|who)\b|explain\b|tell me about\b)")
_MODAL = re.compile(r"\b(?:should|must|need to|have to|ought to)\b")

_TOPIC_ROLES = ("legal", "policy")


def build_score_tables(keywords: Mapping[str, Mapping[str, float]]) -> list[ScoreTable]:
    return [
        ScoreTable(participant_id=pid, keywords=tuple((k.lower(), float(w)) for k, w in table.items()))
        for pid, table in keywords.items()
    ]


class SelectionEngine:
    """Deterministic keyword/topic scorer with a low-confidence fallback chain.

    Usage:
        engine = SelectionEngine.from_config(registry, config.selection)
        result = engine.select("What policy changes would help?", ConversationContext())
        # result.participant_id -> "policy"
    """

    def __init__(
        self,
        registry: ParticipantRegistry,
        score_tables: Sequence[ScoreTable],
        priority: Sequence[str],
        topic_multipliers: Mapping[str, Mapping[str, float]] | None = None,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        word_bonus: float = DEFAULT_WORD_BONUS,
    ) -> None:
        self._registry = registry
        self._tables = {
            t.participant_id: ScoreTable(t.participant_id, tuple((k.lower(), w) for k, w in t.keywords))
            for t in score_tables
        }
        self._topic_multipliers = {t: dict(m) for t, m in (topic_multipliers or {}).items()}
        self._min_confidence = min_confidence
        self._word_bonus = word_bonus
        self._priority = list(priority)
        self._validate()
        self._patterns = {
            keyword: re.compile(rf"\b{re.escape(keyword)}\b")
            for table in self._tables.values()
            for keyword, _ in table.keywords
        }

    @classmethod
    def from_config(cls, registry: ParticipantRegistry, config: SelectionConfig) -> "SelectionEngine":
        return cls(
            registry=registry,
            score_tables=build_score_tables(config.keywords),
            priority=config.priority,
            topic_multipliers=config.topic_multipliers,
            min_confidence=config.min_confidence,
            word_bonus=config.word_bonus,
        )

    def _validate(self) -> None:
        known = set(self._registry.ids)
        referenced = set(self._tables) | set(self._priority)
        for multipliers in self._topic_multipliers.values():
            referenced |= set(multipliers)
        unknown = sorted(referenced - known)
        if unknown:
            raise ConfigError(f"Selection config references unknown participants: {', '.join(unknown)}")
        if len(set(self._priority)) != len(self._priority):
            raise ConfigError("Selection priority list contains duplicates")
        uncovered = [pid for pid in self._registry.ids if pid not in self._priority]
        if uncovered:
            raise ConfigError(f"Selection priority list is missing: {', '.join(uncovered)}")

    def raw_score(self, participant_id: str, message: str) -> float:
        """Keyword score for one participant before topic multipliers."""
        table = self._tables.get(participant_id)
        if table is None:
            return 0.0
        lowered = message.lower()
        score = 0.0
        for keyword, weight in table.keywords:
            if keyword in lowered:
                score += weight
                if self._patterns[keyword].search(lowered):
                    score += self._word_bonus
        return score

    def score(self, message: str, context: ConversationContext) -> list[ParticipantScore]:
        """Scores for every participant, in priority order."""
        multipliers = self._topic_multipliers.get(context.topic or "", {})
        return [
            ParticipantScore(pid, self.raw_score(pid, message) * multipliers.get(pid, 1.0))
            for pid in self._priority
        ]

    def select(self, message: str, context: ConversationContext) -> SelectionResult:
        scores = self.score(message, context)
        by_id = {s.participant_id: s.score for s in scores}

        # max() keeps the first maximal element, so priority order breaks ties
        best = max(scores, key=lambda s: s.score)
        if best.score >= self._min_confidence:
            chosen, reason = best.participant_id, "keywords"
        else:
            chosen, reason = self._fallback(message, context, best.participant_id)

        logger.debug("Selected %s (%s, score=%.2f) for message: %.60s", chosen, reason, by_id[chosen], message)
        return SelectionResult(participant_id=chosen, score=by_id[chosen], scores=tuple(scores), reason=reason)

    def _fallback(self, message: str, context: ConversationContext, top_ranked: str) -> tuple[str, str]:
        lowered = message.lower()

        if _INTERROGATIVE.match(lowered) and "educator" in self._registry:
            return "educator", "interrogative"

        if _MODAL.search(lowered):
            for pid in ("activist", "policy"):
                if pid in self._registry:
                    return pid, "modal"

        topic = (context.topic or "").lower()
        if topic in _TOPIC_ROLES and topic in self._registry:
            return topic, "topic"

        if "economist" in self._registry:
            return "economist", "default"
        return top_ranked, "default"
