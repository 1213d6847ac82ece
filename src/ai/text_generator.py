"""
Text generation collaborator.

Thin wrapper around the OpenAI chat completions API with a narrow contract:
a prompt, an output length and a temperature in; generated text out, or a
TextGenerationError. Callers decide what to do on failure.
"""

from typing import Optional

from pydantic import BaseModel, Field

from src.config import get_settings
from src.logging_config import get_logger

logger = get_logger(__name__)


class TextGenerationError(Exception):
    """The collaborator could not produce usable text."""


class GenerationRequest(BaseModel):
    """Request for a single completion."""

    prompt: str
    max_tokens: int = Field(default=100, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


def is_placeholder_key(key: str) -> bool:
    return not key or key.startswith("sk-your-")


class TextGenerator:
    """
    OpenAI-backed text generator.

    Usage:
        generator = TextGenerator()
        text = await generator.generate(GenerationRequest(prompt="...", max_tokens=50))
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.api_key = (api_key if api_key is not None else settings.openai_api_key or "").strip()
        self.model = model or settings.openai_model
        self.timeout_seconds = timeout_seconds or settings.openai_timeout_seconds
        self._client = None

    @property
    def is_configured(self) -> bool:
        return not is_placeholder_key(self.api_key)

    def _get_client(self):
        if self._client is None:
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout_seconds)
        return self._client

    async def generate(self, request: GenerationRequest) -> str:
        """
        Generate text for a prompt.

        Raises:
            TextGenerationError: no API key, API/network failure, or empty output
        """
        if not self.is_configured:
            raise TextGenerationError("OpenAI API key not configured")

        from openai import OpenAIError

        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": request.prompt}],
                max_tokens=request.max_tokens,
                temperature=request.temperature,
            )
        except OpenAIError as exc:
            raise TextGenerationError(f"OpenAI request failed: {exc}") from exc

        if not response.choices:
            raise TextGenerationError("OpenAI returned no choices")
        content = (response.choices[0].message.content or "").strip()
        if not content:
            raise TextGenerationError("OpenAI returned empty content")

        logger.debug(
            "Text generated",
            extra={"model": self.model, "chars": len(content), "max_tokens": request.max_tokens},
        )
        return content
