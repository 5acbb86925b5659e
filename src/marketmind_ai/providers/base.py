"""
Base provider abstract class and the chat-completion wire models.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import structlog
from pydantic import BaseModel, Field, ConfigDict

logger = structlog.get_logger()


class ChatMessage(BaseModel):
    """Represents a single chat message."""

    role: str = Field(..., description="Message role (system, user, assistant)")
    content: str = Field(..., description="Message content")


class ChatCompletionRequest(BaseModel):
    """Chat-completion request in the shape the upstream provider expects."""

    messages: List[ChatMessage] = Field(..., description="Conversation messages")
    model: str = Field(..., description="Upstream model identifier")
    max_tokens: int = Field(default=400, gt=0, description="Maximum tokens in the completion")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Nucleus sampling")
    frequency_penalty: Optional[float] = Field(default=None, description="Frequency penalty")
    presence_penalty: Optional[float] = Field(default=None, description="Presence penalty")

    model_config = ConfigDict(
        protected_namespaces=(),
        json_schema_extra={
            "example": {
                "messages": [
                    {"role": "system", "content": "You are an expert AI marketing assistant."},
                    {"role": "user", "content": "Write a launch email for our new CRM."},
                ],
                "model": "llama-3.3-70b-versatile",
                "max_tokens": 400,
                "temperature": 0.7,
                "top_p": 0.9,
                "frequency_penalty": 0.1,
                "presence_penalty": 0.1,
            }
        },
    )

    def to_provider_kwargs(self) -> dict:
        """Keyword arguments for ``chat.completions.create``, omitting unset knobs."""
        kwargs = self.model_dump(exclude_none=True)
        kwargs["messages"] = [m.model_dump() for m in self.messages]
        return kwargs


class ChatCompletionResult(BaseModel):
    """The parts of a completion response the orchestration layer uses."""

    content: str = Field(..., description="First choice message content")
    model: str = Field(..., description="Model that produced the completion")
    total_tokens: int = Field(default=0, description="usage.total_tokens, 0 when absent")
    finish_reason: Optional[str] = Field(default=None, description="Completion finish reason")

    model_config = ConfigDict(protected_namespaces=())


class BaseProvider(ABC):
    """Abstract base class for upstream language-model providers."""

    name: str = "base"

    @abstractmethod
    async def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResult:
        """
        Run one chat completion.

        Raises:
            UpstreamError: If the provider rejects or fails the request
        """

    async def close(self) -> None:
        """Release network resources held by the provider."""

    def _log_request(self, request: ChatCompletionRequest) -> None:
        logger.debug(
            "provider_request",
            provider=self.name,
            model=request.model,
            message_count=len(request.messages),
            temperature=request.temperature,
            max_tokens=request.max_tokens,
        )

    def _log_response(self, result: ChatCompletionResult, duration: float) -> None:
        logger.debug(
            "provider_response",
            provider=self.name,
            model=result.model,
            total_tokens=result.total_tokens,
            finish_reason=result.finish_reason,
            duration=round(duration, 3),
        )
