"""Abstract base for all text-completion providers."""

from abc import ABC, abstractmethod

from council.models import ChatMessage, CompletionOptions, RawCompletion

TIMEOUT = "timeout"
AUTH = "auth"
TRANSPORT = "transport"
MALFORMED = "malformed"


class ProviderError(Exception):
    """Raised when a provider call fails.

    ``category`` is one of ``timeout``, ``auth``, ``transport`` or ``malformed``.
    """

    def __init__(self, provider_name: str, message: str, category: str = TRANSPORT) -> None:
        self.provider_name = provider_name
        self.category = category
        super().__init__(f"[{provider_name}] {message}")


class AIProvider(ABC):
    """Abstract base for all text-completion providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'deepseek', 'claude')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def complete(self, messages: list[ChatMessage], options: CompletionOptions) -> RawCompletion:
        """Run a chat completion.

        Args:
            messages: Ordered system/user/assistant messages.
            options: Generation parameters (max tokens, temperature, penalties).

        Returns:
            RawCompletion dataclass with content and metadata.

        Raises:
            ProviderError: On API failure, timeout, or invalid response.
        """
        ...


class UnconfiguredProvider(AIProvider):
    """Stands in for a provider whose API key is missing; every call fails with ``auth``."""

    def __init__(self, provider_name: str, reason: str = "API key not configured") -> None:
        self._name = provider_name
        self._reason = reason

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "unconfigured"

    async def complete(self, messages: list[ChatMessage], options: CompletionOptions) -> RawCompletion:
        raise ProviderError(self._name, self._reason, category=AUTH)


def split_system(messages: list[ChatMessage]) -> tuple[str, list[ChatMessage]]:
    """Separate system messages (joined) from the conversational turns."""
    system = "\n\n".join(m.content for m in messages if m.role == "system")
    turns = [m for m in messages if m.role != "system"]
    return system, turns
