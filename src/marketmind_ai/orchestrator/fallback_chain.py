"""Fallback chain runner: ordered multi-model failover with short-circuit on success."""

import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import structlog

from marketmind_ai.orchestrator.registry import ModelDescriptor
from marketmind_ai.orchestrator.retry_handler import RetryHandler
from marketmind_ai.providers.base import ChatCompletionResult
from marketmind_ai.telemetry.metrics import MetricsCollector, metrics_collector

logger = structlog.get_logger()

Operation = Callable[[], Awaitable[ChatCompletionResult]]
CallBuilder = Callable[[ModelDescriptor], Operation]


class ChainState(str, Enum):
    """Fallback chain states."""

    TRYING = "trying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class AttemptResult:
    """Outcome of one model in the chain, after that model's own retries."""

    model: ModelDescriptor
    succeeded: bool
    latency_ms: int
    content: Optional[str] = None
    tokens_used: Optional[int] = None
    error: Optional[str] = None

    def describe_failure(self) -> str:
        return f"{self.model.identifier}: {self.error}"


@dataclass
class ChainOutcome:
    """Final state of a chain run: one success, or every model's failure."""

    state: ChainState
    attempts: List[AttemptResult] = field(default_factory=list)
    result: Optional[ChatCompletionResult] = None

    @property
    def succeeded(self) -> bool:
        return self.state is ChainState.SUCCEEDED

    @property
    def winner(self) -> Optional[AttemptResult]:
        if not self.succeeded:
            return None
        return self.attempts[-1]

    @property
    def rank(self) -> int:
        """1-based position of the winning model in the chain, 0 when exhausted."""
        return len(self.attempts) if self.succeeded else 0

    @property
    def fallback_used(self) -> bool:
        return self.rank > 1

    def failures(self) -> List[str]:
        return [a.describe_failure() for a in self.attempts if not a.succeeded]

    def failure_summary(self) -> str:
        return " | ".join(self.failures())


class FallbackChainRunner:
    """Tries models in priority order, each wrapped by the retry handler.

    Transitions: ``TRYING(i) -> SUCCEEDED`` on the first success,
    ``TRYING(i) -> TRYING(i + 1)`` on failure, and ``TRYING(last) ->
    EXHAUSTED`` when the final model fails. Models after the winner are
    never invoked.
    """

    def __init__(
        self,
        retry_handler: RetryHandler,
        metrics: MetricsCollector = metrics_collector,
    ):
        self.retry_handler = retry_handler
        self.metrics = metrics

    async def run(
        self,
        models: Sequence[ModelDescriptor],
        call_builder: CallBuilder,
        operation_name: str = "generation",
    ) -> ChainOutcome:
        if not models:
            raise ValueError("Fallback chain needs at least one model")

        log = logger.bind(operation=operation_name, chain=[m.identifier for m in models])
        outcome = ChainOutcome(state=ChainState.TRYING)
        index = 0

        while outcome.state is ChainState.TRYING:
            model = models[index]
            log.info("chain_attempt", model=model.identifier, role=model.role.value, rank=index + 1)
            start_time = time.perf_counter()

            try:
                result = await self.retry_handler.execute(
                    call_builder(model), operation_name=f"{operation_name}:{model.identifier}"
                )
            except Exception as e:
                attempt = AttemptResult(
                    model=model,
                    succeeded=False,
                    latency_ms=_elapsed_ms(start_time),
                    error=getattr(e, "message", None) or str(e) or type(e).__name__,
                )
                outcome.attempts.append(attempt)
                self.metrics.record_attempt(model.identifier, False, attempt.latency_ms)
                log.warning("chain_model_failed", model=model.identifier, error=attempt.error)

                index += 1
                if index == len(models):
                    outcome.state = ChainState.EXHAUSTED
            else:
                attempt = AttemptResult(
                    model=model,
                    succeeded=True,
                    latency_ms=_elapsed_ms(start_time),
                    content=result.content,
                    tokens_used=result.total_tokens,
                )
                outcome.attempts.append(attempt)
                outcome.result = result
                outcome.state = ChainState.SUCCEEDED
                self.metrics.record_attempt(model.identifier, True, attempt.latency_ms)
                self.metrics.record_tokens(model.identifier, operation_name, result.total_tokens)
                if index > 0:
                    self.metrics.increment_counter("fallbacks", labels={"operation": operation_name})
                log.info(
                    "chain_succeeded",
                    model=model.identifier,
                    rank=index + 1,
                    latency_ms=attempt.latency_ms,
                    tokens_used=result.total_tokens,
                )

        if outcome.state is ChainState.EXHAUSTED:
            self.metrics.increment_counter("chain_exhausted", labels={"operation": operation_name})
            log.error("chain_exhausted", failures=outcome.failures())

        return outcome


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)
