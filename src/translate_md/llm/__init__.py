"""
LLM provider abstraction layer.

The translation client depends only on LLMProvider; the concrete provider
speaks the OpenAI chat-completions API to the configured endpoint.
"""

from translate_md.llm.base import LLMProvider, LLMResponse, Message, prompt_messages
from translate_md.llm.factory import create_llm_provider
from translate_md.llm.openai_compat import OpenAICompatibleProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "Message",
    "prompt_messages",
    "OpenAICompatibleProvider",
    "create_llm_provider",
]
