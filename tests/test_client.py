"""Tests for the translation client."""

import pytest

from conftest import FakeProvider, build_settings
from translate_md.exceptions import PermanentServiceError, TransientServiceError
from translate_md.translation.client import (
    FORMAT_SYSTEM_PROMPT,
    FORMAT_TEMPERATURE,
    TranslationClient,
    build_format_prompt,
    build_translation_prompt,
)


def make_client(provider):
    return TranslationClient(provider, build_settings().service)


class TestBuildPrompt:
    def test_contains_language_instructions_and_text(self):
        prompt = build_translation_prompt("Hello world", "fr", "formal tone")

        assert "Translate the following text to fr." in prompt
        assert "Instructions: formal tone." in prompt
        assert "---\nHello world\n---" in prompt
        assert "Markdown" in prompt

    def test_html_hint_changes_requirements(self):
        prompt = build_translation_prompt("<p>Hi</p>", "de", "formal", "HTML")

        assert "translated HTML" in prompt


class TestTranslationClient:
    async def test_returns_translated_text(self):
        provider = FakeProvider("Bonjour le monde")
        client = make_client(provider)

        result = await client.translate("Hello world", "fr", "formal")

        assert result == "Bonjour le monde"
        request = provider.requests[0]
        assert request["messages"][0]["role"] == "system"
        assert "Hello world" in request["messages"][1]["content"]
        assert request["temperature"] == 0.7
        assert request["max_tokens"] == 4000

    async def test_strips_service_added_fences(self):
        client = make_client(FakeProvider("```markdown\n# Titre\n```"))

        assert await client.translate("# Title", "fr", "formal") == "# Titre"

    @pytest.mark.parametrize("content", ["", "   ", "```markdown\n```"])
    async def test_empty_content_is_permanent_error(self, content):
        client = make_client(FakeProvider(content))

        with pytest.raises(PermanentServiceError) as exc_info:
            await client.translate("Hello", "fr", "formal")

        assert exc_info.value.language == "fr"

    async def test_service_errors_propagate_with_language(self):
        class FailingProvider(FakeProvider):
            async def complete(self, messages, **kwargs):
                raise TransientServiceError("timed out")

        client = make_client(FailingProvider())

        with pytest.raises(TransientServiceError) as exc_info:
            await client.translate("Hello", "de", "formal")

        assert exc_info.value.language == "de"

    async def test_format_hint_reaches_system_prompt(self):
        provider = FakeProvider("<p>Hallo</p>")
        client = make_client(provider)

        await client.translate("<p>Hello</p>", "de", "formal", "HTML")

        assert "HTML format" in provider.requests[0]["messages"][0]["content"]

    async def test_truncated_reply_is_still_returned(self):
        client = make_client(FakeProvider("Bonjour", finish_reason="length"))

        assert await client.translate("Hello", "fr", "formal") == "Bonjour"


class TestReformat:
    def test_prompt_wraps_text(self):
        prompt = build_format_prompt("#Title\n\ntext")

        assert "---\n#Title\n\ntext\n---" in prompt
        assert "Reformat" in prompt

    async def test_uses_format_prompt_and_low_temperature(self):
        provider = FakeProvider("```markdown\n# Title\n\nText\n```")
        client = make_client(provider)

        result = await client.reformat("#Title\ntext")

        assert result == "# Title\n\nText"
        request = provider.requests[0]
        assert request["messages"][0]["content"] == FORMAT_SYSTEM_PROMPT
        assert request["temperature"] == FORMAT_TEMPERATURE
        assert "Translate" not in request["messages"][1]["content"]

    async def test_empty_reply_is_permanent_error(self):
        client = make_client(FakeProvider(""))

        with pytest.raises(PermanentServiceError, match="No formatted content"):
            await client.reformat("text")
