"""
Service boundary for text-transformation requests.

A provider answers one system + user prompt pair per call. Re-running the
pipeline is the only recovery, so providers never retry on their own:
failures surface as TransientServiceError (network, rate limits, server
errors) or PermanentServiceError (anything a re-run would not fix).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

Message = dict[str, str]


def prompt_messages(system_prompt: str, user_prompt: str) -> list[Message]:
    """Chat messages for a system prompt followed by one user turn."""
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


@dataclass(frozen=True)
class LLMResponse:
    """Reply to one request."""

    content: str
    model: str = ""
    finish_reason: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: float = 0.0

    @property
    def truncated(self) -> bool:
        """The reply stopped at the max_tokens limit."""
        return self.finish_reason == "length"


class LLMProvider(ABC):
    """One chat-completions style endpoint; one request per call."""

    name = "llm"

    @property
    @abstractmethod
    def model(self) -> str:
        """Model name sent with every request."""

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> LLMResponse:
        """Send ``messages`` as a single request."""

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> LLMResponse:
        return await self.complete(
            prompt_messages(system_prompt, user_prompt),
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"
