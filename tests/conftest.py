"""Pytest configuration and fixtures."""

from typing import Dict, List, Optional, Union

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from marketmind_ai.config.settings import Settings
from marketmind_ai.orchestrator import FallbackChainRunner, ModelRegistry, ModelRole, RetryHandler
from marketmind_ai.orchestrator.health_monitor import HealthMonitor
from marketmind_ai.providers.base import BaseProvider, ChatCompletionRequest, ChatCompletionResult
from marketmind_ai.services.generation_service import GenerationService
from marketmind_ai.telemetry.metrics import MetricsCollector

MODEL_IDS = {
    ModelRole.PRIMARY: "primary-70b",
    ModelRole.ALTERNATIVE: "alternative-70b",
    ModelRole.CREATIVE: "creative-8x7b",
    ModelRole.INSTRUCTION: "instruction-70b",
    ModelRole.FALLBACK: "fallback-8b",
}

Outcome = Union[str, ChatCompletionResult, Exception]


class ScriptedProvider(BaseProvider):
    """Provider fake that answers from per-model scripts and records every request.

    A list script is consumed one outcome per call, then the default reply is
    used. A bare exception script makes the model fail on every call.
    """

    name = "scripted"

    def __init__(self, default: str = "Generated marketing copy", tokens: int = 42):
        self.default = default
        self.tokens = tokens
        self.scripts: Dict[str, Union[List[Outcome], Exception]] = {}
        self.calls: List[ChatCompletionRequest] = []
        self.closed = False

    def script(self, model: str, *outcomes: Outcome) -> None:
        self.scripts[model] = list(outcomes)

    def fail_always(self, model: str, error: Exception) -> None:
        self.scripts[model] = error

    def calls_for(self, model: str) -> List[ChatCompletionRequest]:
        return [c for c in self.calls if c.model == model]

    @property
    def called_models(self) -> List[str]:
        return [c.model for c in self.calls]

    async def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResult:
        self.calls.append(request)
        script = self.scripts.get(request.model)

        if isinstance(script, Exception):
            raise script
        outcome: Optional[Outcome] = script.pop(0) if script else None

        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, ChatCompletionResult):
            return outcome
        return ChatCompletionResult(
            content=outcome if outcome is not None else self.default,
            model=request.model,
            total_tokens=self.tokens,
            finish_reason="stop",
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def registry():
    return ModelRegistry(dict(MODEL_IDS))


@pytest.fixture
def metrics():
    """Metrics on a private registry so collectors never clash between tests."""
    return MetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def sleeps():
    """Delays requested by the retry handler, in seconds."""
    return []


@pytest.fixture
def retry_handler(sleeps):
    async def record_sleep(seconds):
        sleeps.append(seconds)

    return RetryHandler(max_attempts=3, base_delay_ms=1000, jitter_ms=500, sleep=record_sleep)


@pytest.fixture
def single_shot_retry(sleeps):
    async def record_sleep(seconds):
        sleeps.append(seconds)

    return RetryHandler(max_attempts=1, sleep=record_sleep)


@pytest.fixture
def chain_runner(retry_handler, metrics):
    return FallbackChainRunner(retry_handler, metrics=metrics)


@pytest.fixture
def health_monitor(provider, registry, metrics):
    return HealthMonitor(provider, registry, metrics=metrics)


@pytest.fixture
def service(provider, registry, chain_runner, health_monitor):
    return GenerationService(provider, registry, chain_runner, health_monitor=health_monitor)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        GROQ_API_KEY="gsk_test_key",
        HEALTH_CHECK_ON_STARTUP=False,
        MODEL_PRIMARY=MODEL_IDS[ModelRole.PRIMARY],
        MODEL_ALTERNATIVE=MODEL_IDS[ModelRole.ALTERNATIVE],
        MODEL_CREATIVE=MODEL_IDS[ModelRole.CREATIVE],
        MODEL_INSTRUCTION=MODEL_IDS[ModelRole.INSTRUCTION],
        MODEL_FALLBACK=MODEL_IDS[ModelRole.FALLBACK],
    )


@pytest.fixture
def app(settings, provider, retry_handler, metrics):
    from marketmind_ai.server.main import create_app

    return create_app(settings=settings, provider=provider, retry_handler=retry_handler, metrics=metrics)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
