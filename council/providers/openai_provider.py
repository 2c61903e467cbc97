"""OpenAI-compatible provider using openai SDK with native async (OpenAI, DeepSeek, xAI)."""

import asyncio
import logging
import os
import time

import openai
from openai import AsyncOpenAI

from config.config_loader import ProviderConfig
from council.models import ChatMessage, CompletionOptions, RawCompletion
from council.providers.base import AUTH, MALFORMED, TIMEOUT, TRANSPORT, AIProvider, ProviderError

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(AIProvider):
    """Chat-completions provider via openai SDK; ``base_url`` selects the vendor."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}", category=AUTH)
        self._client = AsyncOpenAI(api_key=api_key, base_url=config.base_url)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def complete(self, messages: list[ChatMessage], options: CompletionOptions) -> RawCompletion:
        kwargs: dict = {
            "model": self._config.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }
        if options.frequency_penalty is not None:
            kwargs["frequency_penalty"] = options.frequency_penalty
        if options.presence_penalty is not None:
            kwargs["presence_penalty"] = options.presence_penalty

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(**kwargs),
                timeout=self._config.timeout_sec,
            )
        except (TimeoutError, openai.APITimeoutError) as exc:
            raise ProviderError(
                self._config.name, f"Request timed out after {self._config.timeout_sec}s", category=TIMEOUT
            ) from exc
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise ProviderError(self._config.name, f"Authentication failed: {exc}", category=AUTH) from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}", category=TRANSPORT) from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise ProviderError(self._config.name, "Empty response content", category=MALFORMED)

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.total_tokens

        logger.info("%s completion: %.2fs, %s tokens", self._config.name, latency, token_count)

        return RawCompletion(
            provider=self._config.name,
            model=self._config.model,
            content=choice.message.content,
            latency_sec=latency,
            token_count=token_count,
        )
