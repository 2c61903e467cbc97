"""Story analysis via structured provider output, empty on any failure."""

import asyncio
import logging

from council.generator import DEFAULT_TIMEOUT_SEC
from council.models import ChatMessage, CompletionOptions, StoryAnalysis
from council.parsing import parse_completion
from council.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)

ANALYSIS_MAX_TOKENS = 1000
ANALYSIS_TEMPERATURE = 0.7
_SENTIMENTS = ("positive", "negative", "neutral")

_SYSTEM_PROMPT = (
    "You are an AI assistant specialized in economic justice analysis. Provide thoughtful, "
    "nuanced analysis of personal stories related to economic challenges and community support."
)

_USER_PROMPT = """Analyze this economic justice story and provide structured insights:

STORY CONTENT:
{content}

Please analyze for:
1. Key economic justice themes present
2. Emotional tone and sentiment
3. Potential community connections
4. Resource recommendations
5. Content moderation flags

Return JSON response with this structure:
{{
  "themes": ["theme1", "theme2"],
  "sentiment": {{"primary": "positive/negative/neutral", "confidence": 0.95}},
  "community_tags": ["tag1", "tag2"],
  "recommended_resources": ["resource_type1", "resource_type2"],
  "moderation_flags": {{
    "needs_review": boolean,
    "reasons": [],
    "confidence": 0.0
  }}
}}"""


def empty_analysis() -> StoryAnalysis:
    return StoryAnalysis(fallback=True)


def _strings(raw: object) -> list[str]:
    if isinstance(raw, str):
        return [raw]
    if not isinstance(raw, list):
        return []
    return [str(item) for item in raw if item is not None]


def _confidence(raw: object) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return 0.0
    return min(max(float(raw), 0.0), 1.0)


def analysis_from_structured(structured: object) -> StoryAnalysis | None:
    """Map a decoded analysis object; None when it is not an object with ``themes``."""
    if not isinstance(structured, dict) or "themes" not in structured:
        return None

    sentiment = structured.get("sentiment")
    if isinstance(sentiment, dict):
        primary, confidence = sentiment.get("primary"), sentiment.get("confidence")
    else:
        primary, confidence = sentiment, None
    primary = str(primary or "neutral").lower()

    flags = structured.get("moderation_flags")
    if not isinstance(flags, dict):
        flags = {}

    return StoryAnalysis(
        themes=_strings(structured.get("themes")),
        sentiment=primary if primary in _SENTIMENTS else "neutral",
        sentiment_confidence=_confidence(confidence),
        community_tags=_strings(structured.get("community_tags")),
        recommended_resources=_strings(structured.get("recommended_resources")),
        needs_review=flags.get("needs_review") is True,
        review_reasons=_strings(flags.get("reasons")),
    )


class StoryAnalyzer:
    """Asks the provider for themes, sentiment and resource suggestions for a story."""

    def __init__(self, provider: AIProvider, timeout_sec: float = DEFAULT_TIMEOUT_SEC) -> None:
        self._provider = provider
        self._timeout_sec = timeout_sec

    async def analyze(self, content: str) -> StoryAnalysis:
        messages = [
            ChatMessage("system", _SYSTEM_PROMPT),
            ChatMessage("user", _USER_PROMPT.format(content=content)),
        ]
        options = CompletionOptions(max_tokens=ANALYSIS_MAX_TOKENS, temperature=ANALYSIS_TEMPERATURE)
        try:
            raw = await asyncio.wait_for(self._provider.complete(messages, options), timeout=self._timeout_sec)
        except (TimeoutError, ProviderError) as exc:
            logger.warning("Story analysis failed, returning empty analysis: %s", exc)
            return empty_analysis()
        except Exception as exc:
            logger.warning("Story analysis unexpected failure, returning empty analysis: %s", exc)
            return empty_analysis()

        result = analysis_from_structured(parse_completion(raw).structured)
        if result is None:
            logger.warning("Story analysis output was not an analysis object")
            return empty_analysis()
        return result
