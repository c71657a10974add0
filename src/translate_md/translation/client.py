"""
Translation client.

Turns one piece of text into one target language (or into cleaned-up
Markdown) with a single request to the configured LLM provider. No retries:
failures propagate to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from translate_md.config import ServiceConfig
from translate_md.exceptions import PermanentServiceError, TranslationError
from translate_md.llm import LLMProvider
from translate_md.translation.fences import strip_code_fences

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful translation assistant. You translate text accurately "
    "based on the provided instructions and return the result in {format} format."
)

FORMAT_SYSTEM_PROMPT = (
    "You are an expert assistant that turns rough Markdown into clean, "
    "well-structured Markdown while keeping its content and structure."
)

# Reformatting should be close to deterministic
FORMAT_TEMPERATURE = 0.2

_FORMAT_REQUIREMENTS = {
    "Markdown": """- Return ONLY the translated text.
- Format the output as clean, well-structured Markdown.
- Use appropriate Markdown for headings and sections based on the source text structure.
- Remove any unnecessary extra whitespace (leading/trailing spaces, multiple blank lines).
- Do not wrap the output in a code block.""",
    "HTML": """- Return ONLY the translated HTML.
- Keep every tag, attribute and attribute value exactly as in the source.
- Translate only human-readable text content and the alt/title attributes.
- Do not wrap the output in a code block.""",
}


@dataclass
class TranslationResult:
    """Translated text for one chunk (or a whole document, index 0)."""

    index: int
    text: str


def build_translation_prompt(
    text: str,
    target_language: str,
    instructions: str,
    format_hint: str = "Markdown",
) -> str:
    """Build the user prompt for one translation request."""
    requirements = _FORMAT_REQUIREMENTS.get(format_hint, _FORMAT_REQUIREMENTS["Markdown"])
    return f"""Translate the following text to {target_language}.
Instructions: {instructions}.
Formatting Requirements:
{requirements}
- Return the full entirely translated text, don't summarize and don't leave out sections.

Text to translate:
---
{text}
---
"""


def build_format_prompt(text: str) -> str:
    """Build the user prompt for one Markdown reformatting request."""
    return f"""Reformat the following Markdown text into a clean, well-structured Markdown document.
Keep the meaning, the structure (headings, lists, paragraphs, code blocks, tables) and all content.
Make the formatting consistent and remove stray whitespace and extraction artifacts.
Return ONLY the reformatted Markdown, without any introduction or explanation.

Markdown text to reformat:
---
{text}
---
"""


class TranslationClient:
    """Performs single translation requests through an LLM provider."""

    def __init__(self, provider: LLMProvider, service: ServiceConfig):
        """
        Args:
            provider: LLM provider used for every request.
            service: Service settings (temperature, max_tokens).
        """
        self._provider = provider
        self._temperature = service.temperature
        self._max_tokens = service.max_tokens

    @property
    def model(self) -> str:
        return self._provider.model

    async def translate(
        self,
        text: str,
        target_language: str,
        instructions: str,
        format_hint: str = "Markdown",
    ) -> str:
        """
        Translate ``text`` into ``target_language``.

        Returns:
            The translated text with any wrapping code fence removed.

        Raises:
            TransientServiceError: Network or service-side failure.
            PermanentServiceError: The response had no usable content.
        """
        logger.debug(
            "Requesting %s translation (%d chars, model %s)",
            target_language,
            len(text),
            self._provider.model,
        )
        return await self._request(
            SYSTEM_PROMPT.format(format=format_hint),
            build_translation_prompt(text, target_language, instructions, format_hint),
            temperature=self._temperature,
            language=target_language,
            empty_message="No translation content received from API",
        )

    async def reformat(self, text: str) -> str:
        """
        Clean up the Markdown formatting of ``text`` without translating it.

        Raises:
            TransientServiceError: Network or service-side failure.
            PermanentServiceError: The response had no usable content.
        """
        logger.debug("Requesting reformat (%d chars, model %s)", len(text), self._provider.model)
        return await self._request(
            FORMAT_SYSTEM_PROMPT,
            build_format_prompt(text),
            temperature=FORMAT_TEMPERATURE,
            language="",
            empty_message="No formatted content received from API",
        )

    async def _request(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        language: str,
        empty_message: str,
    ) -> str:
        label = language or "format"
        try:
            response = await self._provider.chat(
                system_prompt,
                user_prompt,
                temperature=temperature,
                max_tokens=self._max_tokens,
            )
        except TranslationError as e:
            e.language = e.language or language
            raise

        text = strip_code_fences(response.content)
        if not text:
            raise PermanentServiceError(empty_message, language=language)

        if response.truncated:
            logger.warning("%s reply hit the max_tokens limit; output may be truncated", label)

        logger.debug(
            "Received %s reply (%d tokens in, %d out, %.0f ms)",
            label,
            response.input_tokens,
            response.output_tokens,
            response.latency_ms,
        )
        return text
