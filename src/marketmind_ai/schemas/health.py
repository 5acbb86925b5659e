"""Model health records and diagnostics reports."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from marketmind_ai.orchestrator.registry import ModelDescriptor


class ModelStatus(str, Enum):
    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    UNAVAILABLE = "unavailable"


class ModelHealthRecord(BaseModel):
    """Latest probe result for one registered model."""

    model: ModelDescriptor
    status: ModelStatus = ModelStatus.UNKNOWN
    latency_ms: int = 0
    tokens_used: int = 0
    last_checked_at: Optional[datetime] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    sample: Optional[str] = Field(default=None, description="Response text from a model test run")

    model_config = ConfigDict(frozen=True)

    @property
    def healthy(self) -> bool:
        return self.status is ModelStatus.HEALTHY


class ModelTestSummary(BaseModel):
    total_tested: int
    success_count: int
    failure_count: int
    total_test_time_ms: int
    average_response_time_ms: int
    total_tokens_used: int


class ModelTestReport(BaseModel):
    """Result of running a realistic prompt through every registered model."""

    results: Dict[str, ModelHealthRecord]
    summary: ModelTestSummary
    tested_at: datetime
    provider: str = "groq"
    recommendations: List[str]


class ModelHealthView(BaseModel):
    status: Dict[str, ModelHealthRecord]
    last_checked: Optional[datetime]
    provider: str = "groq"
    available_models: List[ModelDescriptor]
