"""Facade exposed to the HTTP layer and CLI: wires config, registry, selection and generation."""

import logging
import random
from collections.abc import MutableSequence, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from config.config_loader import AppConfig, TopicConfig
from council.analysis import StoryAnalyzer
from council.followup import FollowUpOrchestrator
from council.generator import ResponseGenerator
from council.models import ConversationContext, FollowUpResult, HistoryEntry, ModerationResult, StoryAnalysis
from council.moderation import ContentModerator
from council.prompts import PromptAssembler
from council.providers.anthropic import AnthropicProvider
from council.providers.base import AIProvider, ProviderError, UnconfiguredProvider
from council.providers.gemini import GeminiProvider
from council.providers.openai_provider import OpenAICompatibleProvider
from council.registry import ParticipantRegistry
from council.selection import SelectionEngine

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "openai": OpenAICompatibleProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
}


def build_provider(config: AppConfig, name: str | None = None) -> AIProvider:
    """Instantiate the named (or default) provider.

    Falls back to UnconfiguredProvider when the provider is unknown or its key
    is missing, so every generation takes the canned-fallback path.
    """
    name = name or config.defaults.provider
    provider_cfg = config.providers.get(name)
    if provider_cfg is None:
        logger.warning("Provider '%s' not defined in settings, responses will use fallbacks", name)
        return UnconfiguredProvider(name, "provider not defined in settings")
    provider_cls = PROVIDER_CLASSES.get(provider_cfg.sdk)
    if provider_cls is None:
        logger.warning("Provider '%s' uses unknown sdk '%s'", name, provider_cfg.sdk)
        return UnconfiguredProvider(name, f"unknown sdk: {provider_cfg.sdk}")
    try:
        return provider_cls(provider_cfg)
    except ProviderError as exc:
        logger.warning("Provider '%s' unavailable, responses will use fallbacks: %s", name, exc)
        return UnconfiguredProvider(name, str(exc))


def build_all_providers(config: AppConfig) -> dict[str, AIProvider]:
    """Build every provider with an API key set. Returns dict keyed by name."""
    providers: dict[str, AIProvider] = {}
    for name in sorted(config.available_providers):
        provider = build_provider(config, name)
        if not isinstance(provider, UnconfiguredProvider):
            providers[name] = provider
    return providers


def resolve_context(context: ConversationContext | None, topics: dict[str, TopicConfig]) -> ConversationContext:
    """Fill description and key points from the topic catalog when the caller left them out."""
    context = context or ConversationContext()
    topic = topics.get(context.topic or "")
    if topic is None:
        return context
    return replace(
        context,
        description=context.description or topic.description,
        key_points=list(context.key_points) or list(topic.key_points),
    )


class ConversationStore:
    """In-memory history arena keyed by conversation id.

    Owned by the service layer; participants never hold history.
    """

    def __init__(self, max_entries: int = 200) -> None:
        self._conversations: dict[str, list[HistoryEntry]] = {}
        self._max_entries = max_entries

    def history(self, conversation_id: str) -> list[HistoryEntry]:
        """Snapshot copy of a conversation's history."""
        return list(self._conversations.get(conversation_id, []))

    def transcript(self, conversation_id: str) -> MutableSequence[HistoryEntry]:
        return self._conversations.setdefault(conversation_id, [])

    def trim(self, conversation_id: str) -> None:
        entries = self._conversations.get(conversation_id)
        if entries is not None and len(entries) > self._max_entries:
            del entries[: len(entries) - self._max_entries]

    def clear(self, conversation_id: str) -> None:
        self._conversations.pop(conversation_id, None)

    def __len__(self) -> int:
        return len(self._conversations)


@dataclass
class ChatReply:
    response: str
    agent: str
    participant_id: str
    fallback: bool
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class CouncilService:
    """Entry point for listing participants, selecting, generating and following up."""

    def __init__(
        self,
        registry: ParticipantRegistry,
        engine: SelectionEngine,
        generator: ResponseGenerator,
        follow_ups: FollowUpOrchestrator,
        moderator: ContentModerator,
        analyzer: StoryAnalyzer | None = None,
        topics: dict[str, TopicConfig] | None = None,
        conversations: ConversationStore | None = None,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.generator = generator
        self.follow_ups = follow_ups
        self.moderator = moderator
        self.analyzer = analyzer or StoryAnalyzer(generator.provider)
        self.topics = topics or {}
        self.conversations = conversations or ConversationStore()

    @property
    def provider(self) -> AIProvider:
        return self.generator.provider

    def list_participants(self) -> list[dict[str, str]]:
        return [summary.to_dict() for summary in self.registry.all()]

    def select(self, message: str, context: ConversationContext | None = None) -> str:
        return self.engine.select(message, context or ConversationContext()).participant_id

    async def generate(
        self,
        participant_id: str,
        message: str,
        context: ConversationContext | None = None,
        history: Sequence[HistoryEntry] = (),
        transcript: MutableSequence[HistoryEntry] | None = None,
    ) -> str:
        """Generate a reply; raises ParticipantNotFoundError for an unknown id only."""
        participant = self.registry.get(participant_id)
        return await self.generator.generate(
            participant, message, resolve_context(context, self.topics), history, transcript
        )

    async def chat(
        self,
        message: str,
        context: ConversationContext | None = None,
        history: Sequence[HistoryEntry] | None = None,
        participant_id: str | None = None,
        conversation_id: str | None = None,
    ) -> ChatReply:
        """Select (unless ``participant_id`` is given) and generate a reply.

        With a ``conversation_id`` the stored history is used when the caller
        sends none, and successful exchanges are recorded in the store.
        """
        context = context or ConversationContext()
        if participant_id is None:
            participant_id = self.engine.select(message, context).participant_id
        participant = self.registry.get(participant_id)

        transcript = None
        if conversation_id is not None:
            if history is None:
                history = self.conversations.history(conversation_id)
            transcript = self.conversations.transcript(conversation_id)

        reply = await self.generator.generate_reply(
            participant, message, resolve_context(context, self.topics), history or (), transcript
        )
        if conversation_id is not None:
            self.conversations.trim(conversation_id)

        logger.info("Chat reply from %s%s", participant.id, " [fallback]" if reply.fallback else "")
        return ChatReply(
            response=reply.text,
            agent=participant.name,
            participant_id=participant.id,
            fallback=reply.fallback,
        )

    async def follow_up(
        self,
        original_message: str,
        first_response: str,
        context: ConversationContext | None = None,
        exclude_participant_id: str | None = None,
    ) -> FollowUpResult | None:
        return await self.follow_ups.follow_up(
            original_message, first_response, resolve_context(context, self.topics), exclude_participant_id
        )

    async def moderate(self, content: str, content_type: str = "message") -> ModerationResult:
        return await self.moderator.moderate(content, content_type)

    async def analyze_story(self, content: str) -> StoryAnalysis:
        return await self.analyzer.analyze(content)


def build_service(
    config: AppConfig,
    provider: AIProvider | None = None,
    rng: random.Random | None = None,
) -> CouncilService:
    """Wire a CouncilService from configuration.

    Raises ConfigError for an empty registry or selection tables that
    reference unknown participants.
    """
    rng = rng or random.Random()
    registry = ParticipantRegistry.from_config(config.participants)
    engine = SelectionEngine.from_config(registry, config.selection)
    provider = provider or build_provider(config)
    generator = ResponseGenerator(
        provider,
        assembler=PromptAssembler(history_window=config.defaults.history_window),
        rng=rng,
        timeout_sec=config.defaults.timeout_sec,
    )
    logger.info("Council ready: %d participants, provider %s", len(registry), provider.name())
    return CouncilService(
        registry=registry,
        engine=engine,
        generator=generator,
        follow_ups=FollowUpOrchestrator(registry, generator, rng=rng),
        moderator=ContentModerator(provider, timeout_sec=config.defaults.timeout_sec),
        analyzer=StoryAnalyzer(provider, timeout_sec=config.defaults.timeout_sec),
        topics=config.topics,
    )
