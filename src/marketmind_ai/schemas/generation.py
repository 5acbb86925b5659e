"""Request and result models for the AI generation endpoints."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from marketmind_ai.orchestrator.registry import ModelDescriptor


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentType(str, Enum):
    """Allowed content and campaign types."""

    EMAIL = "email"
    SOCIAL = "social"
    AD = "ad"
    BLOG = "blog"


class GenerationKind(str, Enum):
    CONTENT = "content"
    CAMPAIGN = "campaign"
    FORECAST = "forecast"


class BrandSettings(BaseModel):
    """Brand voice applied to every generation prompt."""

    tone: str = Field(default="professional", description="Brand tone")
    style: str = Field(default="conversational", description="Writing style")
    target_audience: str = Field(
        default="business professionals",
        alias="targetAudience",
        description="Who the copy is written for",
    )
    guidelines: Optional[str] = Field(default=None, description="Free-form brand guidelines")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "BrandSettings":
        """Build from a loosely-typed mapping, treating blank values as unset."""
        if not payload:
            return cls()
        cleaned = {k: v for k, v in payload.items() if v not in (None, "")}
        return cls.model_validate(cleaned)


class GenerationRequest(BaseModel):
    """One logical generation request, before validation."""

    kind: GenerationKind
    prompt: str = ""
    content_type: Optional[str] = None
    brand_settings: BrandSettings = Field(default_factory=BrandSettings)
    sales_data: Optional[Any] = None
    context: Optional[str] = None


class GenerationOutcome(BaseModel):
    """Successful result of a fallback-chain generation."""

    content: str = Field(..., description="Generated text")
    model_used: ModelDescriptor = Field(..., description="Model that produced the content")
    fallback_used: bool = Field(..., description="True when a model after the first answered")
    rank: int = Field(..., ge=1, description="1-based position of the model in the chain")
    tokens_used: int = Field(default=0, description="Total tokens reported upstream")
    generated_at: datetime = Field(default_factory=utcnow)
    provider: str = Field(default="groq")

    model_config = ConfigDict(protected_namespaces=())


class ContentResult(GenerationOutcome):
    """Outcome of free-form content generation."""

    prompt: str
    content_type: ContentType
    word_count: int
    character_count: int


class CampaignDraft(BaseModel):
    """Structured campaign copy parsed out of a model's free-text response."""

    subject: str = ""
    body: str = ""
    variations: List[str] = Field(default_factory=list)
    call_to_action: str = ""


class CampaignAIMetadata(BaseModel):
    model: str
    prompt: str
    generated_at: datetime


class CampaignDraftResult(BaseModel):
    """Draft plus the campaign record fields handed to the persistence layer."""

    user_id: str
    name: str
    campaign_type: ContentType
    status: str = "draft"
    content: CampaignDraft
    ai_metadata: CampaignAIMetadata
    outcome: GenerationOutcome
    raw_text: str


class ForecastResult(BaseModel):
    """Sales forecast returned verbatim with generation metadata."""

    forecast: str
    model_used: ModelDescriptor
    fallback_used: bool
    tokens_used: int
    generated_at: datetime
    sales_data_input: Any
    business_context: str
    provider: str = "groq"

    model_config = ConfigDict(protected_namespaces=())


class OptimizationType(str, Enum):
    ENGAGEMENT = "engagement"
    CONVERSION = "conversion"
    READABILITY = "readability"
    PROFESSIONAL = "professional"


class OptimizationResult(BaseModel):
    original_content: str
    optimized_content: str
    optimization_type: OptimizationType
    objective: str
    model_used: ModelDescriptor
    tokens_used: int
    generated_at: datetime
    provider: str = "groq"

    model_config = ConfigDict(protected_namespaces=())
