"""Custom exceptions for MarketMind AI."""

from typing import Optional, Dict, Any, List


class MarketMindException(Exception):
    """Base exception for MarketMind AI."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.status_code = status_code
        self.details = details or {}


class ValidationException(MarketMindException):
    """Malformed or missing request input. Raised before any upstream call."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, error_code="VALIDATION_ERROR", status_code=400, **kwargs)
        self.field = field
        if field:
            self.details["field"] = field


ValidationError = ValidationException


class UpstreamError(MarketMindException):
    """A single model attempt failed."""

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        retryable: bool = True,
        upstream_status: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(message, error_code="UPSTREAM_ERROR", status_code=502, **kwargs)
        self.model = model
        self.retryable = retryable
        self.upstream_status = upstream_status
        if model:
            self.details["model"] = model


class ChainExhaustedError(MarketMindException):
    """Every model in a fallback chain failed.

    The message concatenates each ``"<model>: <message>"`` failure so the
    whole chain is diagnosable from a single log line or response body.
    """

    default_error_code = "CHAIN_EXHAUSTED"
    prefix = "All models failed"

    def __init__(self, failures: List[str], message: Optional[str] = None, **kwargs):
        summary = " | ".join(failures)
        super().__init__(
            message or f"{self.prefix}: {summary}",
            error_code=self.default_error_code,
            status_code=502,
            **kwargs,
        )
        self.failures = list(failures)
        self.details["failures"] = self.failures


class GenerationError(ChainExhaustedError):
    """Content or campaign generation exhausted its fallback chain."""

    default_error_code = "GENERATION_FAILED"
    prefix = "Content generation failed"


class ForecastError(ChainExhaustedError):
    """Sales forecasting exhausted its fallback chain."""

    default_error_code = "FORECAST_FAILED"
    prefix = "Sales forecast failed"


class OptimizationError(ChainExhaustedError):
    """Content optimization exhausted its fallback chain."""

    default_error_code = "OPTIMIZATION_FAILED"
    prefix = "Content optimization failed"


class DraftInvalidError(MarketMindException):
    """Generation succeeded but the parsed draft broke campaign rules."""

    def __init__(self, errors: List[str], raw_text: str = "", **kwargs):
        super().__init__(
            "Generated campaign failed validation: " + "; ".join(errors),
            error_code="DRAFT_INVALID",
            status_code=422,
            **kwargs,
        )
        self.errors = list(errors)
        self.raw_text = raw_text
        self.details["errors"] = self.errors


__all__ = [
    "MarketMindException",
    "ValidationException",
    "ValidationError",
    "UpstreamError",
    "ChainExhaustedError",
    "GenerationError",
    "ForecastError",
    "OptimizationError",
    "DraftInvalidError",
]
