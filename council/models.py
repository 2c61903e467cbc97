"""Pure dataclasses for the council pipeline. No logic beyond trivial views, no deps."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ParticipantSummary:
    id: str
    name: str
    role: str
    specialty: str
    avatar: str
    persona: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "specialty": self.specialty,
            "avatar": self.avatar,
            "persona": self.persona,
        }


@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    role: str
    specialty: str
    avatar: str
    persona: str
    expertise: tuple[str, ...]
    response_styles: tuple[str, ...]
    fallbacks: tuple[str, ...]             # primary-response fallback catalog
    follow_up_fallbacks: tuple[str, ...]   # follow-up fallback catalog

    def summary(self) -> ParticipantSummary:
        return ParticipantSummary(
            id=self.id,
            name=self.name,
            role=self.role,
            specialty=self.specialty,
            avatar=self.avatar,
            persona=self.persona,
        )


@dataclass
class ConversationContext:
    topic: str | None = None
    description: str = ""
    key_points: list[str] = field(default_factory=list)
    mode: str = "discussion"


@dataclass
class HistoryEntry:
    author: str
    content: str
    timestamp: datetime | None = None


@dataclass(frozen=True)
class ScoreTable:
    participant_id: str
    keywords: tuple[tuple[str, float], ...]  # (lower-cased keyword, weight)


@dataclass(frozen=True)
class ParticipantScore:
    participant_id: str
    score: float


@dataclass(frozen=True)
class SelectionResult:
    participant_id: str
    score: float
    scores: tuple[ParticipantScore, ...]   # every participant, priority order
    reason: str                            # "keywords", "interrogative", "modal", "topic", "default"


@dataclass
class ChatMessage:
    role: str      # "system", "user" or "assistant"
    content: str


@dataclass
class CompletionOptions:
    max_tokens: int
    temperature: float
    frequency_penalty: float | None = None
    presence_penalty: float | None = None


@dataclass
class RawCompletion:
    provider: str          # "deepseek", "openai", "claude", "grok", "gemini"
    model: str             # actual model string used
    content: str
    latency_sec: float
    token_count: int | None


@dataclass
class ParsedCompletion:
    structured: Any        # decoded JSON value, None for prose
    text: str              # usable assistant text, "" when there is none
    is_text: bool


@dataclass
class Reply:
    text: str
    participant_id: str
    fallback: bool = False


@dataclass
class FollowUpResult:
    text: str
    participant_id: str
    fallback: bool = False


@dataclass
class ModerationResult:
    approved: bool
    reasons: list[str] = field(default_factory=list)
    severity: str = "low"
    suggestions: str = ""
    fallback: bool = False


@dataclass
class StoryAnalysis:
    themes: list[str] = field(default_factory=list)
    sentiment: str = "neutral"            # "positive", "negative", "neutral"
    sentiment_confidence: float = 0.0
    community_tags: list[str] = field(default_factory=list)
    recommended_resources: list[str] = field(default_factory=list)
    needs_review: bool = False
    review_reasons: list[str] = field(default_factory=list)
    fallback: bool = False

    def to_dict(self) -> dict:
        """Wire shape: sentiment and moderation flags nested as objects."""
        return {
            "themes": list(self.themes),
            "sentiment": {"primary": self.sentiment, "confidence": self.sentiment_confidence},
            "community_tags": list(self.community_tags),
            "recommended_resources": list(self.recommended_resources),
            "moderation_flags": {"needs_review": self.needs_review, "reasons": list(self.review_reasons)},
        }
