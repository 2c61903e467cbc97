"""Secondary contributions from a participant other than the first responder."""

import logging
import random

from council.generator import ResponseGenerator
from council.models import ConversationContext, FollowUpResult
from council.registry import ParticipantRegistry

logger = logging.getLogger(__name__)


class FollowUpOrchestrator:
    """Picks a different participant at random and asks for a short complementary take."""

    def __init__(
        self,
        registry: ParticipantRegistry,
        generator: ResponseGenerator,
        rng: random.Random | None = None,
    ) -> None:
        self._registry = registry
        self._generator = generator
        self._rng = rng or random.Random()

    async def follow_up(
        self,
        original_message: str,
        first_response: str,
        context: ConversationContext,
        exclude_participant_id: str | None,
    ) -> FollowUpResult | None:
        """Return a follow-up, or None only when no participant is registered."""
        if len(self._registry) == 0:
            return None

        participant = self._registry.random_other_than(exclude_participant_id, rng=self._rng)
        reply = await self._generator.follow_up_reply(participant, original_message, first_response, context)
        logger.info(
            "Follow-up from %s (excluded %s)%s",
            participant.id,
            exclude_participant_id,
            " [fallback]" if reply.fallback else "",
        )
        return FollowUpResult(text=reply.text, participant_id=participant.id, fallback=reply.fallback)
