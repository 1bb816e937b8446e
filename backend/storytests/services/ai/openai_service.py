"""
OpenAI Service for Test Case Generation

This module is the thin gateway to the hosted generation service. It sends
one chat completion request in JSON mode and hands back the raw text and
token usage exactly as the service reported them. It does not retry and
does not parse the content.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional

from openai import AsyncOpenAI, APIError

from storytests.core.config import Settings, settings as default_settings
from storytests.core.exceptions import ConfigurationException, GenerationServiceException
from storytests.utils.correlation import get_correlation_logger

logger = get_correlation_logger(__name__)


@dataclass(frozen=True)
class ModelCompletion:
    """Raw completion text plus the usage metadata reported alongside it."""
    content: str
    model: Optional[str]
    prompt_tokens: int
    completion_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class OpenAIService:
    """Gateway to an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[Any] = None,
    ):
        settings = settings or default_settings

        if client is None:
            if not settings.OPENAI_API_KEY:
                raise ConfigurationException(
                    "OPENAI_API_KEY",
                    "Generation service API key is not configured on the server",
                )
            client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.OPENAI_BASE_URL,
                timeout=settings.GENERATION_TIMEOUT_SECONDS,
                max_retries=0,
            )

        self.client = client
        self.model = settings.OPENAI_MODEL
        self.max_tokens = settings.OPENAI_MAX_TOKENS
        self.temperature = settings.OPENAI_TEMPERATURE

        logger.debug("OpenAI service initialized", model=self.model)

    async def generate(self, system_prompt: str, user_prompt: str) -> ModelCompletion:
        """
        Run one chat completion and return its content and usage.

        Raises:
            GenerationServiceException: on network, timeout, HTTP status or
                payload shape failures, with the underlying error as cause.
        """
        start_time = time.perf_counter()
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except APIError as e:
            logger.error(
                "Generation service call failed",
                error=str(e),
                error_type=type(e).__name__,
                status_code=getattr(e, "status_code", None),
                model=self.model,
            )
            raise GenerationServiceException(
                f"Generation service call failed: {e}", cause=e
            ) from e

        completion = self._extract_completion(response)

        logger.info(
            "Generation service call completed",
            model=completion.model,
            prompt_tokens=completion.prompt_tokens,
            completion_tokens=completion.completion_tokens,
            processing_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return completion

    def _extract_completion(self, response: Any) -> ModelCompletion:
        """Pull content and usage out of a chat completion payload."""
        choices = getattr(response, "choices", None)
        if not choices:
            raise GenerationServiceException("Generation service returned no choices")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise GenerationServiceException("Generation service returned no message content")

        usage = getattr(response, "usage", None)
        return ModelCompletion(
            content=content,
            model=getattr(response, "model", None) or self.model,
            prompt_tokens=getattr(usage, "prompt_tokens", None) or 0,
            completion_tokens=getattr(usage, "completion_tokens", None) or 0,
        )
