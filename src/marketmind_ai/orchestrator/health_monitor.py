"""Model health monitor: probes every registered model and keeps the status table."""

import asyncio
import time
from datetime import datetime, timezone
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence

import structlog

from marketmind_ai.orchestrator.registry import ModelDescriptor, ModelRegistry, ModelRole
from marketmind_ai.providers.base import BaseProvider, ChatCompletionRequest, ChatMessage
from marketmind_ai.schemas.health import (
    ModelHealthRecord,
    ModelHealthView,
    ModelStatus,
    ModelTestReport,
    ModelTestSummary,
)
from marketmind_ai.telemetry.metrics import MetricsCollector, metrics_collector

logger = structlog.get_logger()

HealthTable = Mapping[ModelRole, ModelHealthRecord]

FAST_RESPONSE_MS = 2000


class HealthMonitor:
    """Sole writer of the process-wide model health table.

    Each probe cycle builds a complete new table and swaps it in with a
    single assignment, so readers see either the previous table or the new
    one, never a mix. Probes are single-shot: no retries, and failures are
    recorded rather than raised.
    """

    PROBE_PROMPT = "Health check"
    PROBE_MAX_TOKENS = 5
    PROBE_TEMPERATURE = 0.1

    TEST_PROMPT = "Create a brief test marketing email announcement"
    TEST_MAX_TOKENS = 100
    TEST_TEMPERATURE = 0.7

    def __init__(
        self,
        provider: BaseProvider,
        registry: ModelRegistry,
        metrics: MetricsCollector = metrics_collector,
    ):
        self.provider = provider
        self.registry = registry
        self.metrics = metrics
        self._records: HealthTable = MappingProxyType(
            {model.role: ModelHealthRecord(model=model) for model in registry}
        )
        self._last_checked: Optional[datetime] = None
        self._cycles_started = 0
        self._published_cycle = 0

    def snapshot(self) -> HealthTable:
        """Read-only view of the current table."""
        return self._records

    @property
    def last_checked(self) -> Optional[datetime]:
        return self._last_checked

    async def _probe(
        self,
        model: ModelDescriptor,
        prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> ModelHealthRecord:
        request = ChatCompletionRequest(
            messages=[ChatMessage(role="user", content=prompt)],
            model=model.identifier,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        start_time = time.perf_counter()
        try:
            result = await self.provider.chat_completion(request)
        except Exception as e:
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            logger.warning(
                "model_unavailable",
                model=model.identifier,
                role=model.role.value,
                latency_ms=latency_ms,
                error=str(e),
            )
            return ModelHealthRecord(
                model=model,
                status=ModelStatus.UNAVAILABLE,
                latency_ms=latency_ms,
                last_checked_at=datetime.now(timezone.utc),
                error=getattr(e, "message", None) or str(e),
                error_type=type(e).__name__,
            )

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "model_available",
            model=model.identifier,
            role=model.role.value,
            latency_ms=latency_ms,
            tokens_used=result.total_tokens,
        )
        return ModelHealthRecord(
            model=model,
            status=ModelStatus.HEALTHY,
            latency_ms=latency_ms,
            tokens_used=result.total_tokens,
            last_checked_at=datetime.now(timezone.utc),
            sample=result.content,
        )

    async def _run_cycle(self, prompt: str, max_tokens: int, temperature: float) -> HealthTable:
        """Probe every model and publish the table unless a later-started cycle already has."""
        self._cycles_started += 1
        cycle = self._cycles_started
        models = list(self.registry)
        records = await asyncio.gather(
            *(self._probe(model, prompt, max_tokens, temperature) for model in models)
        )
        table = MappingProxyType({record.model.role: record for record in records})

        if cycle < self._published_cycle:
            logger.info("health_cycle_superseded", cycle=cycle, published=self._published_cycle)
            return table

        self._published_cycle = cycle
        self._records = table
        self._last_checked = datetime.now(timezone.utc)

        for record in records:
            self.metrics.record_model_health(
                record.model.role.value, record.model.identifier, record.healthy
            )
        return table

    async def probe_all(self) -> HealthTable:
        """Probe every registered model once and replace the table. Never raises."""
        logger.info("health_probe_started", models=len(self.registry))
        table = await self._run_cycle(
            self.PROBE_PROMPT, self.PROBE_MAX_TOKENS, self.PROBE_TEMPERATURE
        )
        logger.info(
            "health_probe_completed",
            healthy=sum(1 for r in table.values() if r.healthy),
            total=len(table),
        )
        return table

    def get_available_models(self) -> List[ModelDescriptor]:
        """Healthy models, or ``[primary]`` when none are; never empty."""
        available = [r.model for r in self._records.values() if r.healthy]
        return available or [self.registry.primary]

    def is_unavailable(self, model: ModelDescriptor) -> bool:
        record = self._records.get(model.role)
        return record is not None and record.status is ModelStatus.UNAVAILABLE

    def order_chain(self, chain: Sequence[ModelDescriptor]) -> List[ModelDescriptor]:
        """Move models that failed their last probe to the back; order is otherwise kept.

        Advisory only: no model is ever dropped from the chain.
        """
        preferred = [m for m in chain if not self.is_unavailable(m)]
        demoted = [m for m in chain if self.is_unavailable(m)]
        return preferred + demoted

    async def test_models(self, prompt: Optional[str] = None) -> ModelTestReport:
        """Run a realistic prompt through every model and report on the results."""
        start_time = time.perf_counter()
        table = await self._run_cycle(
            prompt or self.TEST_PROMPT, self.TEST_MAX_TOKENS, self.TEST_TEMPERATURE
        )
        total_time_ms = int((time.perf_counter() - start_time) * 1000)

        records = list(table.values())
        successes = [r for r in records if r.healthy]
        summary = ModelTestSummary(
            total_tested=len(records),
            success_count=len(successes),
            failure_count=len(records) - len(successes),
            total_test_time_ms=total_time_ms,
            average_response_time_ms=round(sum(r.latency_ms for r in records) / len(records)),
            total_tokens_used=sum(r.tokens_used for r in successes),
        )
        return ModelTestReport(
            results={role.value: record for role, record in table.items()},
            summary=summary,
            tested_at=datetime.now(timezone.utc),
            recommendations=self.recommendations(records),
        )

    @staticmethod
    def recommendations(records: Sequence[ModelHealthRecord]) -> List[str]:
        working = [r for r in records if r.healthy]
        failed = [r for r in records if not r.healthy]
        recommendations = []

        if not working:
            recommendations.append(
                "CRITICAL: No models are currently working. Check GROQ_API_KEY and network connectivity."
            )
        elif len(working) < 3:
            recommendations.append("WARNING: Limited model availability may affect reliability.")
        else:
            recommendations.append("Model availability is good.")

        if failed:
            names = ", ".join(r.model.role.value for r in failed)
            recommendations.append(f"Investigate failed models: {names}")

        fast = [r for r in working if r.latency_ms < FAST_RESPONSE_MS]
        if fast:
            names = ", ".join(r.model.role.value for r in fast)
            recommendations.append(f"Fast models available: {names}")

        total_tokens = sum(r.tokens_used for r in working)
        if total_tokens > 0:
            recommendations.append(
                f"Total tokens used in testing: {total_tokens}; monitor usage for cost optimization"
            )

        return recommendations

    def get_model_health(self) -> ModelHealthView:
        return ModelHealthView(
            status={role.value: record for role, record in self._records.items()},
            last_checked=self._last_checked,
            available_models=[r.model for r in self._records.values() if r.healthy],
        )
