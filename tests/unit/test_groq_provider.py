"""Test Groq provider request mapping and error translation."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    NotFoundError,
    RateLimitError,
)

from marketmind_ai.exceptions import UpstreamError
from marketmind_ai.providers import ChatCompletionRequest, ChatMessage, GroqProvider

URL = "https://api.groq.com/openai/v1/chat/completions"


def completion(content, total_tokens=12):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason="stop")],
        usage=SimpleNamespace(total_tokens=total_tokens),
    )


def status_error(cls, status_code, message="error"):
    request = httpx.Request("POST", URL)
    return cls(message, response=httpx.Response(status_code, request=request), body=None)


@pytest.fixture
def client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion("  Fresh copy  "))
    client.close = AsyncMock()
    return client


@pytest.fixture
def groq(client):
    return GroqProvider(api_key="gsk_test", client=client)


@pytest.fixture
def request_model():
    return ChatCompletionRequest(
        messages=[ChatMessage(role="user", content="Write a tagline")],
        model="primary-70b",
        max_tokens=5,
        temperature=0.1,
    )


class TestGroqProvider:
    @pytest.mark.asyncio
    async def test_successful_completion(self, groq, client, request_model):
        result = await groq.chat_completion(request_model)

        assert result.content == "Fresh copy"
        assert result.model == "primary-70b"
        assert result.total_tokens == 12
        assert result.finish_reason == "stop"

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "primary-70b"
        assert kwargs["max_tokens"] == 5
        assert kwargs["messages"] == [{"role": "user", "content": "Write a tagline"}]
        assert "top_p" not in kwargs

    @pytest.mark.asyncio
    async def test_missing_usage_counts_zero_tokens(self, groq, client, request_model):
        response = completion("ok")
        response.usage = None
        client.chat.completions.create.return_value = response

        result = await groq.chat_completion(request_model)

        assert result.total_tokens == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "   "])
    async def test_empty_content_is_not_retryable(self, groq, client, request_model, content):
        client.chat.completions.create.return_value = completion(content)

        with pytest.raises(UpstreamError) as exc_info:
            await groq.chat_completion(request_model)

        assert exc_info.value.message == "No content generated from Groq API"
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, retryable, upstream_status",
        [
            (status_error(AuthenticationError, 401), False, 401),
            (status_error(NotFoundError, 404), False, 404),
            (status_error(BadRequestError, 400), False, 400),
            (status_error(RateLimitError, 429), True, 429),
            (status_error(InternalServerError, 503), True, 503),
        ],
    )
    async def test_status_errors_mapped(self, groq, client, request_model, error, retryable, upstream_status):
        client.chat.completions.create.side_effect = error

        with pytest.raises(UpstreamError) as exc_info:
            await groq.chat_completion(request_model)

        assert exc_info.value.retryable is retryable
        assert exc_info.value.upstream_status == upstream_status
        assert exc_info.value.model == "primary-70b"
        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            APITimeoutError(request=httpx.Request("POST", URL)),
            APIConnectionError(request=httpx.Request("POST", URL)),
        ],
    )
    async def test_transport_errors_are_retryable(self, groq, client, request_model, error):
        client.chat.completions.create.side_effect = error

        with pytest.raises(UpstreamError) as exc_info:
            await groq.chat_completion(request_model)

        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_close(self, groq, client):
        await groq.close()

        client.close.assert_awaited_once()
