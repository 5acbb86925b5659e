"""Prometheus metrics for upstream model traffic and model health."""

from typing import Any

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, generate_latest


class MetricsCollector:
    """Centralized metrics collection with Prometheus integration."""

    def __init__(self, namespace: str = "marketmind_ai", registry: CollectorRegistry = REGISTRY):
        """Initialize metrics collector."""
        self.namespace = namespace
        self.registry = registry
        self._counters: dict[str, Counter] = {}
        self._gauges: dict[str, Gauge] = {}
        self._histograms: dict[str, Histogram] = {}

        self._init_default_metrics()

    def _init_default_metrics(self):
        """Initialize default application metrics."""
        self._counters["model_attempts"] = Counter(
            f"{self.namespace}_model_attempts_total",
            "Upstream model call attempts",
            ["model", "outcome"],
            registry=self.registry,
        )

        self._histograms["model_latency"] = Histogram(
            f"{self.namespace}_model_latency_seconds",
            "Upstream model latency including retries",
            ["model"],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
            registry=self.registry,
        )

        self._counters["tokens_used"] = Counter(
            f"{self.namespace}_tokens_used_total",
            "Total tokens reported by the upstream provider",
            ["model", "operation"],
            registry=self.registry,
        )

        self._counters["fallbacks"] = Counter(
            f"{self.namespace}_fallbacks_total",
            "Generations served by a model other than the first in the chain",
            ["operation"],
            registry=self.registry,
        )

        self._counters["chain_exhausted"] = Counter(
            f"{self.namespace}_chain_exhausted_total",
            "Fallback chains in which every model failed",
            ["operation"],
            registry=self.registry,
        )

        self._gauges["model_healthy"] = Gauge(
            f"{self.namespace}_model_healthy",
            "Latest probe result per model role (1=healthy, 0=unavailable)",
            ["role", "model"],
            registry=self.registry,
        )

    def increment_counter(
        self,
        name: str,
        value: float = 1.0,
        labels: dict[str, str] | None = None,
    ):
        """Increment a counter metric."""
        counter = self._counters[name]
        if labels:
            counter.labels(**labels).inc(value)
        else:
            counter.inc(value)

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ):
        """Set a gauge metric."""
        gauge = self._gauges[name]
        if labels:
            gauge.labels(**labels).set(value)
        else:
            gauge.set(value)

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ):
        """Observe a histogram value."""
        histogram = self._histograms[name]
        if labels:
            histogram.labels(**labels).observe(value)
        else:
            histogram.observe(value)

    def record_attempt(self, model: str, succeeded: bool, latency_ms: int) -> None:
        """Record one model attempt made by a fallback chain."""
        self.increment_counter(
            "model_attempts", labels={"model": model, "outcome": "success" if succeeded else "failure"}
        )
        self.observe_histogram("model_latency", latency_ms / 1000.0, labels={"model": model})

    def record_tokens(self, model: str, operation: str, tokens: int) -> None:
        if tokens > 0:
            self.increment_counter(
                "tokens_used", value=tokens, labels={"model": model, "operation": operation}
            )

    def record_model_health(self, role: str, model: str, healthy: bool) -> None:
        self.set_gauge("model_healthy", 1.0 if healthy else 0.0, labels={"role": role, "model": model})

    def export(self) -> bytes:
        """Render all metrics in the Prometheus text format."""
        return generate_latest(self.registry)

    def get_metric_value(self, name: str, labels: dict[str, str] | None = None) -> Any:
        """Read a metric's current value from the registry (used by diagnostics)."""
        full_name = f"{self.namespace}_{name}"
        return self.registry.get_sample_value(full_name, labels or {})


metrics_collector = MetricsCollector()
