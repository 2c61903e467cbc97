"""Shared pytest fixtures."""

import random
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, ParticipantConfig, load_config
from council.generator import ResponseGenerator
from council.models import (
    ChatMessage,
    CompletionOptions,
    ConversationContext,
    HistoryEntry,
    Participant,
    RawCompletion,
)
from council.providers.base import AIProvider, ProviderError
from council.registry import ParticipantRegistry
from council.selection import SelectionEngine
from council.service import CouncilService, build_service


def make_completion(content: str, provider: str = "mock") -> RawCompletion:
    return RawCompletion(
        provider=provider,
        model="mock-model",
        content=content,
        latency_sec=0.1,
        token_count=10,
    )


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "Mock response") -> None:
        self._name = provider_name
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because complete is defined in the class body below.
        self.complete = AsyncMock(  # type: ignore[assignment]
            return_value=make_completion(response_content, provider_name)
        )

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def complete(self, messages: list[ChatMessage], options: CompletionOptions) -> RawCompletion:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return make_completion(self._response_content, self._name)


def failing_provider(name: str = "broken", category: str = "transport") -> MockProvider:
    provider = MockProvider(name)
    provider.complete = AsyncMock(side_effect=ProviderError(name, "boom", category=category))
    return provider


def make_participant(pid: str = "economist", **overrides) -> Participant:
    fields = dict(
        id=pid,
        name=f"{pid.title()}Bot",
        role=f"AI {pid.title()}",
        specialty=f"{pid.title()} Studies",
        avatar=pid[0].upper(),
        persona="Analytical, data-driven",
        expertise=("Sovereign money systems", "Public banking models"),
        response_styles=("Cites specific historical examples", "Provides data-driven insights"),
        fallbacks=(f"{pid} fallback one", f"{pid} fallback two"),
        follow_up_fallbacks=(f"{pid} follow-up one", f"{pid} follow-up two"),
    )
    fields.update(overrides)
    return Participant(**fields)


@pytest.fixture
def app_config() -> AppConfig:
    """The shipped settings.yaml."""
    return load_config()


@pytest.fixture
def registry(app_config: AppConfig) -> ParticipantRegistry:
    return ParticipantRegistry.from_config(app_config.participants)


@pytest.fixture
def engine(registry: ParticipantRegistry, app_config: AppConfig) -> SelectionEngine:
    return SelectionEngine.from_config(registry, app_config.selection)


@pytest.fixture
def participant() -> Participant:
    return make_participant()


@pytest.fixture
def sample_participant_config() -> ParticipantConfig:
    return ParticipantConfig(
        id="economist",
        name="EconAgent",
        role="AI Economist",
        specialty="Monetary Policy",
        avatar="E",
        persona="Analytical, data-driven",
        expertise=["Sovereign money systems"],
        response_styles=["Cites specific historical examples"],
        fallbacks=["Econ fallback"],
        follow_up_fallbacks=["Econ follow-up fallback"],
    )


@pytest.fixture
def sample_context() -> ConversationContext:
    return ConversationContext(
        topic="monetary-reform",
        description="Sovereign money creation",
        key_points=["public banking", "monetary democracy"],
        mode="debate",
    )


@pytest.fixture
def sample_history() -> list[HistoryEntry]:
    return [HistoryEntry(author=f"user{i}", content=f"message {i}") for i in range(10)]


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def generator(mock_provider: MockProvider, seeded_rng: random.Random) -> ResponseGenerator:
    return ResponseGenerator(mock_provider, rng=seeded_rng, timeout_sec=1.0)


@pytest.fixture
def service(app_config: AppConfig, mock_provider: MockProvider, seeded_rng: random.Random) -> CouncilService:
    return build_service(app_config, provider=mock_provider, rng=seeded_rng)
