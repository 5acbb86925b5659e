"""
Groq provider implementation over the OpenAI-compatible chat-completions API.
"""

import time
from typing import Optional

import structlog
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
)

from ..exceptions import UpstreamError
from .base import BaseProvider, ChatCompletionRequest, ChatCompletionResult

logger = structlog.get_logger()


class GroqProvider(BaseProvider):
    """Groq provider. Retries are handled by the orchestration layer, not the SDK."""

    name = "groq"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.groq.com/openai/v1",
        timeout: float = 30.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )

    async def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResult:
        """
        Run one chat completion against Groq.

        Args:
            request: Chat-completion request

        Returns:
            ChatCompletionResult: first choice content and token usage

        Raises:
            UpstreamError: with ``retryable`` set according to the failure kind
        """
        self._log_request(request)
        start_time = time.perf_counter()
        model = request.model

        try:
            response = await self.client.chat.completions.create(**request.to_provider_kwargs())
        except (AuthenticationError, PermissionDeniedError) as e:
            raise UpstreamError(
                f"Groq rejected the API key: {e.message}",
                model=model, retryable=False, upstream_status=e.status_code,
            ) from e
        except NotFoundError as e:
            raise UpstreamError(
                f"Model '{model}' not found", model=model, retryable=False, upstream_status=404
            ) from e
        except BadRequestError as e:
            raise UpstreamError(
                f"Invalid request: {e.message}", model=model, retryable=False, upstream_status=400
            ) from e
        except RateLimitError as e:
            raise UpstreamError(
                f"Rate limit exceeded: {e.message}", model=model, retryable=True, upstream_status=429
            ) from e
        except APITimeoutError as e:
            raise UpstreamError(f"Request timed out: {e}", model=model, retryable=True) from e
        except APIConnectionError as e:
            raise UpstreamError(f"Connection error: {e}", model=model, retryable=True) from e
        except APIStatusError as e:
            raise UpstreamError(
                f"Groq API error {e.status_code}: {e.message}",
                model=model, retryable=e.status_code >= 500, upstream_status=e.status_code,
            ) from e

        duration = time.perf_counter() - start_time

        choices = response.choices or []
        content = choices[0].message.content if choices and choices[0].message else None
        if not content or not content.strip():
            raise UpstreamError("No content generated from Groq API", model=model, retryable=False)

        result = ChatCompletionResult(
            content=content.strip(),
            model=model,
            total_tokens=response.usage.total_tokens if response.usage else 0,
            finish_reason=choices[0].finish_reason,
        )
        self._log_response(result, duration)
        return result

    async def close(self) -> None:
        await self.client.close()
