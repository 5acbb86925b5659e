"""Telemetry module for logging and metrics."""

from marketmind_ai.telemetry.logger import setup_logging
from marketmind_ai.telemetry.metrics import MetricsCollector, metrics_collector

__all__ = ["setup_logging", "MetricsCollector", "metrics_collector"]
