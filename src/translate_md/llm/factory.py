"""
LLM provider factory.

Creates the provider described by the service section of the settings.
"""

from __future__ import annotations

from translate_md.config import ServiceConfig
from translate_md.llm.base import LLMProvider
from translate_md.llm.openai_compat import OpenAICompatibleProvider


def create_llm_provider(service: ServiceConfig) -> LLMProvider:
    """
    Create an LLM provider instance.

    Args:
        service: Validated service configuration.

    Returns:
        LLMProvider instance.
    """
    return OpenAICompatibleProvider(
        api_key=service.api_key,
        model=service.model,
        base_url=service.endpoint,
        timeout=service.timeout_seconds,
    )
