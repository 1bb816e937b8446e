"""
Tests for the generation service gateway.
"""

import httpx
import openai
import pytest

from storytests.core.exceptions import (
    ConfigurationException,
    ErrorCode,
    GenerationServiceException,
)
from storytests.services.ai.openai_service import OpenAIService
from tests.helpers import FakeChatClient, chat_completion, make_settings

CHAT_URL = "https://api.example.com/v1/chat/completions"


def _request() -> httpx.Request:
    return httpx.Request("POST", CHAT_URL)


class TestOpenAIService:
    """One call, JSON mode, no retries, raw content returned."""

    @pytest.mark.asyncio
    async def test_returns_content_and_usage(self, gateway, fake_client):
        completion = await gateway.generate("system text", "user text")

        assert completion.content.startswith('{"cases"')
        assert completion.model == "test-model-2024"
        assert completion.prompt_tokens == 120
        assert completion.completion_tokens == 340
        assert completion.total_tokens == 460

    @pytest.mark.asyncio
    async def test_sends_single_json_mode_request(self, gateway, fake_client):
        await gateway.generate("system text", "user text")

        assert len(fake_client.calls) == 1
        call = fake_client.calls[0]
        assert call["model"] == "test-model"
        assert call["response_format"] == {"type": "json_object"}
        assert call["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
        assert call["temperature"] == 0.2
        assert call["max_tokens"] == 4000

    @pytest.mark.asyncio
    async def test_missing_usage_defaults_to_zero(self, settings):
        response = chat_completion("{}", model=None)
        response.usage = None
        service = OpenAIService(settings=settings, client=FakeChatClient(response=response))

        completion = await service.generate("s", "u")

        assert completion.model == "test-model"
        assert completion.prompt_tokens == 0
        assert completion.completion_tokens == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        openai.APIConnectionError(request=_request()),
        openai.APITimeoutError(request=_request()),
        openai.RateLimitError(
            "rate limited",
            response=httpx.Response(429, request=_request()),
            body=None,
        ),
        openai.AuthenticationError(
            "bad key",
            response=httpx.Response(401, request=_request()),
            body=None,
        ),
    ])
    async def test_api_errors_become_generation_failures(self, settings, error):
        client = FakeChatClient(error=error)
        service = OpenAIService(settings=settings, client=client)

        with pytest.raises(GenerationServiceException) as exc_info:
            await service.generate("s", "u")

        assert exc_info.value.error_code == ErrorCode.GENERATION_SERVICE_ERROR
        assert exc_info.value.status_code == 502
        assert exc_info.value.cause is error
        assert len(client.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_choices_is_generation_failure(self, settings):
        response = chat_completion("{}")
        response.choices = []
        service = OpenAIService(settings=settings, client=FakeChatClient(response=response))

        with pytest.raises(GenerationServiceException):
            await service.generate("s", "u")

    @pytest.mark.asyncio
    async def test_null_content_is_generation_failure(self, settings):
        service = OpenAIService(settings=settings, client=FakeChatClient(response=chat_completion(None)))

        with pytest.raises(GenerationServiceException):
            await service.generate("s", "u")

    def test_missing_api_key_is_configuration_error(self):
        with pytest.raises(ConfigurationException) as exc_info:
            OpenAIService(settings=make_settings(OPENAI_API_KEY=None))

        assert exc_info.value.details == {"config_key": "OPENAI_API_KEY"}

    def test_real_client_built_without_retries(self):
        service = OpenAIService(settings=make_settings(
            OPENAI_BASE_URL="https://api.example.com/v1",
            GENERATION_TIMEOUT_SECONDS=12.5,
        ))

        assert isinstance(service.client, openai.AsyncOpenAI)
        assert service.client.max_retries == 0
        assert service.client.timeout == 12.5
