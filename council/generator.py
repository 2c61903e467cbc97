"""Provider calls for participant responses, with canned fallbacks on any failure."""

import asyncio
import logging
import random
from collections.abc import MutableSequence, Sequence
from datetime import datetime, timezone

from council.models import (
    ChatMessage,
    CompletionOptions,
    ConversationContext,
    HistoryEntry,
    Participant,
    Reply,
)
from council.parsing import parse_completion
from council.prompts import PromptAssembler
from council.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)

PRIMARY_MAX_TOKENS = 300
FOLLOW_UP_MAX_TOKENS = 150
FOLLOW_UP_TEMPERATURE = 0.8
FREQUENCY_PENALTY = 0.5
PRESENCE_PENALTY = 0.3
DEFAULT_TIMEOUT_SEC = 30.0

USER_AUTHOR = "User"


def persona_temperature(persona: str) -> float:
    """Sampling temperature derived from the static persona text."""
    lowered = persona.lower()
    if "creative" in lowered or "innovative" in lowered:
        return 0.8
    if "analytical" in lowered or "data-driven" in lowered:
        return 0.5
    return 0.7


class ResponseGenerator:
    """Turns a participant + message into text, never raising for provider failures.

    Conversation history is read from the caller and, on success, the new
    exchange is appended to an optional caller-owned ``transcript``. No state
    is kept between calls.
    """

    def __init__(
        self,
        provider: AIProvider,
        assembler: PromptAssembler | None = None,
        rng: random.Random | None = None,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self._provider = provider
        self._assembler = assembler or PromptAssembler()
        self._rng = rng or random.Random()
        self._timeout_sec = timeout_sec

    @property
    def provider(self) -> AIProvider:
        return self._provider

    async def generate(
        self,
        participant: Participant,
        message: str,
        context: ConversationContext,
        history: Sequence[HistoryEntry],
        transcript: MutableSequence[HistoryEntry] | None = None,
    ) -> str:
        reply = await self.generate_reply(participant, message, context, history, transcript)
        return reply.text

    async def generate_reply(
        self,
        participant: Participant,
        message: str,
        context: ConversationContext,
        history: Sequence[HistoryEntry],
        transcript: MutableSequence[HistoryEntry] | None = None,
    ) -> Reply:
        system_prompt = self._assembler.build(participant, context, history)
        options = CompletionOptions(
            max_tokens=PRIMARY_MAX_TOKENS,
            temperature=persona_temperature(participant.persona),
            frequency_penalty=FREQUENCY_PENALTY,
            presence_penalty=PRESENCE_PENALTY,
        )
        text = await self._complete(
            participant,
            [ChatMessage("system", system_prompt), ChatMessage("user", message)],
            options,
        )
        if text is None:
            return Reply(text=self._rng.choice(participant.fallbacks), participant_id=participant.id, fallback=True)

        if transcript is not None:
            now = datetime.now(timezone.utc)
            transcript.append(HistoryEntry(author=USER_AUTHOR, content=message, timestamp=now))
            transcript.append(HistoryEntry(author=participant.name, content=text, timestamp=now))
        return Reply(text=text, participant_id=participant.id)

    async def follow_up_reply(
        self,
        participant: Participant,
        original_message: str,
        first_response: str,
        context: ConversationContext,
    ) -> Reply:
        focus = self._rng.choice(participant.response_styles) if participant.response_styles else None
        system_prompt = self._assembler.build_follow_up(
            participant, original_message, first_response, context, focus=focus
        )
        options = CompletionOptions(max_tokens=FOLLOW_UP_MAX_TOKENS, temperature=FOLLOW_UP_TEMPERATURE)
        text = await self._complete(
            participant,
            [
                ChatMessage("system", system_prompt),
                ChatMessage("user", f'Please provide a follow-up to this conversation: "{original_message}"'),
            ],
            options,
        )
        if text is None:
            return Reply(
                text=self._rng.choice(participant.follow_up_fallbacks), participant_id=participant.id, fallback=True
            )
        return Reply(text=text, participant_id=participant.id)

    async def _complete(
        self,
        participant: Participant,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> str | None:
        """Call the provider and return usable text, or None on any failure.

        Never raises; failures are logged and the caller substitutes a fallback.
        """
        try:
            raw = await asyncio.wait_for(self._provider.complete(messages, options), timeout=self._timeout_sec)
        except TimeoutError:
            logger.warning(
                "Provider %s timed out after %.0fs for %s", self._provider.name(), self._timeout_sec, participant.name
            )
            return None
        except ProviderError as exc:
            logger.warning("Provider failed (%s) for %s: %s", exc.category, participant.name, exc)
            return None
        except Exception as exc:
            logger.warning("Provider %s unexpected failure for %s: %s", self._provider.name(), participant.name, exc)
            return None

        parsed = parse_completion(raw)
        if not parsed.text.strip():
            logger.warning("Provider %s returned no usable text for %s", self._provider.name(), participant.name)
            return None
        return parsed.text.strip()
