"""
OpenAI-compatible LLM provider.

Talks to any chat-completions endpoint that speaks the OpenAI API (OpenAI,
OpenRouter, Azure-style gateways, local servers).
"""

from __future__ import annotations

import time
from collections.abc import Sequence

import openai
from openai import AsyncOpenAI

from translate_md.exceptions import PermanentServiceError, TransientServiceError
from translate_md.llm.base import LLMProvider, LLMResponse, Message

# Status codes worth re-running the pipeline for
_TRANSIENT_STATUS = {408, 409, 429}


class OpenAICompatibleProvider(LLMProvider):
    """
    Chat-completions provider over the official ``openai`` async client.

    The client is created with ``max_retries=0``: a failed request surfaces
    immediately and is recovered by re-running the pipeline.
    """

    name = "openai-compatible"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 120.0,
    ):
        """
        Initialize the provider.

        Args:
            api_key: Service credential.
            model: Model name sent with every request.
            base_url: API base URL, e.g. ``https://api.openai.com/v1``.
            timeout: Transport timeout in seconds.
        """
        self._model_name = model
        self._base_url = base_url
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self._model_name

    async def complete(
        self,
        messages: Sequence[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> LLMResponse:
        """Send one chat-completions request."""
        start_time = time.perf_counter()

        try:
            response = await self._client.chat.completions.create(
                model=self._model_name,
                messages=list(messages),  # type: ignore[arg-type]
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APIConnectionError as e:
            # Includes APITimeoutError
            raise TransientServiceError(
                f"Connection to {self._base_url} failed: {e}",
                details={"error_type": type(e).__name__},
            ) from e
        except openai.APIStatusError as e:
            error_cls = (
                TransientServiceError
                if e.status_code >= 500 or e.status_code in _TRANSIENT_STATUS
                else PermanentServiceError
            )
            raise error_cls(
                f"API error {e.status_code}: {e.message}",
                details={"status_code": e.status_code, "body": e.body},
            ) from e

        if not response.choices:
            raise PermanentServiceError("Response contained no choices")

        latency_ms = (time.perf_counter() - start_time) * 1000
        choice = response.choices[0]
        content = choice.message.content or ""
        usage = response.usage

        return LLMResponse(
            content=content.strip(),
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=response.model or self._model_name,
            latency_ms=latency_ms,
            finish_reason=choice.finish_reason,
        )
