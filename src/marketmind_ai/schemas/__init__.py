"""Pydantic schemas for generation results and model health."""

from .generation import (
    BrandSettings,
    CampaignAIMetadata,
    CampaignDraft,
    CampaignDraftResult,
    ContentResult,
    ContentType,
    ForecastResult,
    GenerationKind,
    GenerationOutcome,
    GenerationRequest,
    OptimizationResult,
    OptimizationType,
)
from .health import (
    ModelHealthRecord,
    ModelHealthView,
    ModelStatus,
    ModelTestReport,
    ModelTestSummary,
)

__all__ = [
    "BrandSettings",
    "CampaignAIMetadata",
    "CampaignDraft",
    "CampaignDraftResult",
    "ContentResult",
    "ContentType",
    "ForecastResult",
    "GenerationKind",
    "GenerationOutcome",
    "GenerationRequest",
    "OptimizationResult",
    "OptimizationType",
    "ModelHealthRecord",
    "ModelHealthView",
    "ModelStatus",
    "ModelTestReport",
    "ModelTestSummary",
]
