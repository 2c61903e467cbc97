"""Content moderation via structured provider output, permissive on any failure."""

import asyncio
import logging

from council.generator import DEFAULT_TIMEOUT_SEC
from council.models import ChatMessage, CompletionOptions, ModerationResult
from council.parsing import parse_completion
from council.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)

MODERATION_MAX_TOKENS = 200
MODERATION_TEMPERATURE = 0.2
_SEVERITIES = ("low", "medium", "high")

_SYSTEM_PROMPT = """You are a content moderator for an economic justice discussion platform.

Review this {content_type} for:
- Hate speech or harassment
- Spam or irrelevant content
- Misinformation about economic topics
- Personal attacks
- Content that doesn't contribute to constructive dialogue

Respond with a JSON object containing:
{{
  "approved": boolean,
  "reasons": [array of specific issues found],
  "severity": "low|medium|high",
  "suggestions": "how to improve the content if needed"
}}"""


def permissive_default() -> ModerationResult:
    return ModerationResult(
        approved=True,
        reasons=[],
        severity="low",
        suggestions="Content appears acceptable",
        fallback=True,
    )


def result_from_structured(structured: object) -> ModerationResult | None:
    """Map a decoded moderation object; None when it lacks a boolean ``approved``."""
    if not isinstance(structured, dict) or not isinstance(structured.get("approved"), bool):
        return None
    reasons = structured.get("reasons") or []
    if not isinstance(reasons, list):
        reasons = [str(reasons)]
    severity = str(structured.get("severity", "low")).lower()
    return ModerationResult(
        approved=structured["approved"],
        reasons=[str(r) for r in reasons],
        severity=severity if severity in _SEVERITIES else "low",
        suggestions=str(structured.get("suggestions") or ""),
    )


class ContentModerator:
    """Asks the provider for a JSON verdict; never blocks the caller on failure."""

    def __init__(self, provider: AIProvider, timeout_sec: float = DEFAULT_TIMEOUT_SEC) -> None:
        self._provider = provider
        self._timeout_sec = timeout_sec

    async def moderate(self, content: str, content_type: str = "message") -> ModerationResult:
        messages = [
            ChatMessage("system", _SYSTEM_PROMPT.format(content_type=content_type)),
            ChatMessage("user", f'Please moderate this content: "{content}"'),
        ]
        options = CompletionOptions(max_tokens=MODERATION_MAX_TOKENS, temperature=MODERATION_TEMPERATURE)
        try:
            raw = await asyncio.wait_for(self._provider.complete(messages, options), timeout=self._timeout_sec)
        except (TimeoutError, ProviderError) as exc:
            logger.warning("Moderation call failed, approving by default: %s", exc)
            return permissive_default()
        except Exception as exc:
            logger.warning("Moderation unexpected failure, approving by default: %s", exc)
            return permissive_default()

        result = result_from_structured(parse_completion(raw).structured)
        if result is None:
            logger.warning("Moderation output was not a verdict object, approving by default")
            return permissive_default()
        return result
