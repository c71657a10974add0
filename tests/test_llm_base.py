"""Tests for the provider base class."""

from conftest import FakeProvider
from translate_md.llm import LLMResponse, prompt_messages


def test_prompt_messages():
    assert prompt_messages("be brief", "hello") == [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "hello"},
    ]


def test_length_stop_is_truncated():
    assert LLMResponse(content="x", finish_reason="length").truncated
    assert not LLMResponse(content="x", finish_reason="stop").truncated
    assert not LLMResponse(content="x").truncated


async def test_chat_sends_one_request():
    provider = FakeProvider("ok")

    response = await provider.chat("system", "user", temperature=0.1, max_tokens=50)

    assert response.content == "ok"
    assert provider.requests == [
        {
            "messages": prompt_messages("system", "user"),
            "temperature": 0.1,
            "max_tokens": 50,
        }
    ]


def test_repr_names_model():
    assert repr(FakeProvider()) == "FakeProvider(model='fake-model')"
