"""Gemini provider using google-genai SDK with native async."""

import asyncio
import logging
import os
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import ProviderConfig
from council.models import ChatMessage, CompletionOptions, RawCompletion
from council.providers.base import AUTH, MALFORMED, TIMEOUT, TRANSPORT, AIProvider, ProviderError, split_system

logger = logging.getLogger(__name__)


class GeminiProvider(AIProvider):
    """Google Gemini provider via google-genai SDK.

    Frequency/presence penalties are not forwarded; not every Gemini model accepts them.
    """

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}", category=AUTH)
        self._client = genai.Client(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def complete(self, messages: list[ChatMessage], options: CompletionOptions) -> RawCompletion:
        system, turns = split_system(messages)
        contents = [
            genai_types.Content(
                role="model" if m.role == "assistant" else "user",
                parts=[genai_types.Part(text=m.content)],
            )
            for m in turns
        ] or system

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model,
                    contents=contents,
                    config=genai_types.GenerateContentConfig(
                        system_instruction=system if turns and system else None,
                        max_output_tokens=options.max_tokens,
                        temperature=options.temperature,
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(
                self._config.name, f"Request timed out after {self._config.timeout_sec}s", category=TIMEOUT
            ) from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}", category=TRANSPORT) from exc

        latency = time.monotonic() - start

        if not response.text:
            raise ProviderError(self._config.name, "Empty response text", category=MALFORMED)

        token_count: int | None = None
        if response.usage_metadata:
            token_count = response.usage_metadata.total_token_count

        logger.info("Gemini completion: %.2fs, %s tokens", latency, token_count)

        return RawCompletion(
            provider=self._config.name,
            model=self._config.model,
            content=response.text,
            latency_sec=latency,
            token_count=token_count,
        )
