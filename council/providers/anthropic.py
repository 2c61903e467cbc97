"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import logging
import os
import time

import anthropic as anthropic_sdk

from config.config_loader import ProviderConfig
from council.models import ChatMessage, CompletionOptions, RawCompletion
from council.providers.base import AUTH, MALFORMED, TIMEOUT, TRANSPORT, AIProvider, ProviderError, split_system

logger = logging.getLogger(__name__)


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider via anthropic SDK.

    The Messages API has no frequency/presence penalties; those options are ignored.
    """

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}", category=AUTH)
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def complete(self, messages: list[ChatMessage], options: CompletionOptions) -> RawCompletion:
        system, turns = split_system(messages)
        if not turns:
            # Messages API needs at least one user turn
            turns = [ChatMessage(role="user", content=system)]
            system = ""

        kwargs: dict = {
            "model": self._config.model,
            "max_tokens": options.max_tokens,
            "temperature": min(options.temperature, 1.0),
            "messages": [{"role": m.role, "content": m.content} for m in turns],
        }
        if system:
            kwargs["system"] = system

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(**kwargs),
                timeout=self._config.timeout_sec,
            )
        except (TimeoutError, anthropic_sdk.APITimeoutError) as exc:
            raise ProviderError(
                self._config.name, f"Request timed out after {self._config.timeout_sec}s", category=TIMEOUT
            ) from exc
        except (anthropic_sdk.AuthenticationError, anthropic_sdk.PermissionDeniedError) as exc:
            raise ProviderError(self._config.name, f"Authentication failed: {exc}", category=AUTH) from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}", category=TRANSPORT) from exc

        latency = time.monotonic() - start

        if not response.content:
            raise ProviderError(self._config.name, "Empty response content", category=MALFORMED)

        text_blocks = [b.text for b in response.content if b.type == "text"]
        if not text_blocks:
            raise ProviderError(self._config.name, "No text blocks in response", category=MALFORMED)

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info("Anthropic completion: %.2fs, %s tokens", latency, token_count)

        return RawCompletion(
            provider=self._config.name,
            model=self._config.model,
            content="\n".join(text_blocks),
            latency_sec=latency,
            token_count=token_count,
        )
