"""Unit tests for the OpenAI-backed text generator."""

from types import SimpleNamespace

import pytest
from openai import OpenAIError
from pydantic import ValidationError

from src.ai.text_generator import (
    GenerationRequest,
    TextGenerationError,
    TextGenerator,
    is_placeholder_key,
)


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def generator_with(completions: FakeCompletions) -> TextGenerator:
    generator = TextGenerator(api_key="sk-test-key", model="gpt-4o-mini")
    generator._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return generator


class TestConfiguration:
    """API key handling."""

    def test_placeholder_keys(self):
        assert is_placeholder_key("")
        assert is_placeholder_key("sk-your-openai-api-key")
        assert not is_placeholder_key("sk-live-123")

    @pytest.mark.asyncio
    async def test_missing_key_raises(self):
        generator = TextGenerator(api_key="")

        assert not generator.is_configured
        with pytest.raises(TextGenerationError):
            await generator.generate(GenerationRequest(prompt="hi"))

    @pytest.mark.asyncio
    async def test_placeholder_key_raises(self):
        with pytest.raises(TextGenerationError):
            await TextGenerator(api_key="sk-your-key-here").generate(GenerationRequest(prompt="hi"))


class TestGenerate:
    """Completion handling."""

    @pytest.mark.asyncio
    async def test_returns_stripped_content(self):
        completions = FakeCompletions(response=completion("  Ada completed task - Launch  "))
        text = await generator_with(completions).generate(
            GenerationRequest(prompt="title please", max_tokens=50, temperature=0.7)
        )

        assert text == "Ada completed task - Launch"
        call = completions.calls[0]
        assert call["model"] == "gpt-4o-mini"
        assert call["max_tokens"] == 50
        assert call["temperature"] == 0.7
        assert call["messages"] == [{"role": "user", "content": "title please"}]

    @pytest.mark.asyncio
    async def test_empty_content_raises(self):
        generator = generator_with(FakeCompletions(response=completion("   ")))
        with pytest.raises(TextGenerationError):
            await generator.generate(GenerationRequest(prompt="x"))

    @pytest.mark.asyncio
    async def test_no_choices_raises(self):
        generator = generator_with(FakeCompletions(response=SimpleNamespace(choices=[])))
        with pytest.raises(TextGenerationError):
            await generator.generate(GenerationRequest(prompt="x"))

    @pytest.mark.asyncio
    async def test_api_error_is_wrapped(self):
        generator = generator_with(FakeCompletions(error=OpenAIError("rate limited")))
        with pytest.raises(TextGenerationError) as exc_info:
            await generator.generate(GenerationRequest(prompt="x"))
        assert isinstance(exc_info.value.__cause__, OpenAIError)


class TestGenerationRequest:
    def test_defaults(self):
        request = GenerationRequest(prompt="x")
        assert request.max_tokens == 100
        assert request.temperature == 0.7

    @pytest.mark.parametrize("field,value", [("max_tokens", 0), ("temperature", 2.5), ("temperature", -0.1)])
    def test_bounds(self, field, value):
        with pytest.raises(ValidationError):
            GenerationRequest(prompt="x", **{field: value})
