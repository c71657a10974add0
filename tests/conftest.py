"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from translate_md.config import Settings
from translate_md.exceptions import TransientServiceError
from translate_md.llm import LLMProvider, LLMResponse


@dataclass
class RecordedCall:
    text: str
    language: str
    instructions: str
    format_hint: str


@dataclass
class FakeTranslationClient:
    """
    In-memory stand-in for TranslationClient.

    Returns "<lang>:<text>" (reformat: "formatted:<text>") and records every
    call. ``fail_when`` decides, per call, whether to raise instead.
    """

    fail_when: Callable[[RecordedCall, int], bool] | None = None
    delay: float = 0.0
    calls: list[RecordedCall] = field(default_factory=list)
    in_flight: int = 0
    peak_in_flight: int = 0
    in_flight_by_language: dict[str, int] = field(default_factory=dict)
    peak_by_language: dict[str, int] = field(default_factory=dict)

    async def translate(
        self,
        text: str,
        target_language: str,
        instructions: str,
        format_hint: str = "Markdown",
    ) -> str:
        call = RecordedCall(text, target_language, instructions, format_hint)
        self.calls.append(call)
        calls_for_language = sum(1 for c in self.calls if c.language == target_language)

        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        current = self.in_flight_by_language.get(target_language, 0) + 1
        self.in_flight_by_language[target_language] = current
        self.peak_by_language[target_language] = max(
            self.peak_by_language.get(target_language, 0), current
        )
        try:
            await asyncio.sleep(self.delay)
            if self.fail_when is not None and self.fail_when(call, calls_for_language):
                raise TransientServiceError("service unavailable", language=target_language)
            return f"{target_language}:{text}"
        finally:
            self.in_flight -= 1
            self.in_flight_by_language[target_language] -= 1

    async def reformat(self, text: str) -> str:
        # Recorded under the pseudo-language "format"
        translated = await self.translate(text, "format", "", "Markdown")
        return "formatted:" + translated.removeprefix("format:")

    def calls_for(self, language: str) -> list[RecordedCall]:
        return [c for c in self.calls if c.language == language]


class FakeProvider(LLMProvider):
    """LLMProvider returning canned responses and recording messages."""

    name = "fake"

    def __init__(
        self,
        content: str | Callable[[list[dict[str, str]]], str] = "translated",
        finish_reason: str = "stop",
    ):
        self._content = content
        self._finish_reason = finish_reason
        self.requests: list[dict[str, Any]] = []

    @property
    def model(self) -> str:
        return "fake-model"

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> LLMResponse:
        self.requests.append(
            {"messages": list(messages), "temperature": temperature, "max_tokens": max_tokens}
        )
        content = self._content(messages) if callable(self._content) else self._content
        return LLMResponse(content=content, model=self.model, finish_reason=self._finish_reason)


def build_settings(**overrides: Any) -> Settings:
    data: dict[str, Any] = {
        "service": {
            "endpoint": "https://llm.example.com/v1",
            "api_key": "test-key",
            "model": "test-model",
        },
        "languages": {"fr": "formal", "en": "don't translate"},
        "source_language": "en",
        "processing": {"concurrency": 5, "large_file_threshold": 10000, "chunk_size": 10000},
        "logging": {"file": None},
    }
    data.update(overrides)
    return Settings(**data)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    return build_settings


@pytest.fixture
def fake_client() -> FakeTranslationClient:
    return FakeTranslationClient()


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    path = tmp_path / "extracted_md"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "translated"
