"""Orchestrator module: model registry, retries and multi-model fallback."""

from marketmind_ai.orchestrator.registry import ModelDescriptor, ModelRegistry, ModelRole
from marketmind_ai.orchestrator.retry_handler import RetryHandler
from marketmind_ai.orchestrator.fallback_chain import (
    AttemptResult,
    ChainOutcome,
    ChainState,
    FallbackChainRunner,
)

__all__ = [
    "ModelDescriptor",
    "ModelRegistry",
    "ModelRole",
    "RetryHandler",
    "AttemptResult",
    "ChainOutcome",
    "ChainState",
    "FallbackChainRunner",
]
