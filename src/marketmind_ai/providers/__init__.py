"""Upstream language-model providers."""

from .base import BaseProvider, ChatCompletionRequest, ChatCompletionResult, ChatMessage
from .groq_provider import GroqProvider

__all__ = [
    "BaseProvider",
    "ChatCompletionRequest",
    "ChatCompletionResult",
    "ChatMessage",
    "GroqProvider",
]
