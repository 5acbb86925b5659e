"""
AI generation endpoints: content, optimization, campaign drafts and sales forecasts.

Request bodies accept loose types; input rules live in the service, which
raises ValidationError (400).
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, status
from pydantic import BaseModel, ConfigDict, Field

from marketmind_ai.api.dependencies import get_generation_service
from marketmind_ai.services.generation_service import GenerationService

router = APIRouter(
    responses={
        400: {"description": "Invalid input"},
        422: {"description": "Generated campaign failed validation"},
        502: {"description": "All upstream models failed"},
    },
)


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateContentBody(_Body):
    prompt: Optional[str] = Field(None, description="What to write")
    content_type: Optional[str] = Field(None, alias="contentType", description="email, social, ad or blog")
    brand_settings: Optional[Dict[str, Any]] = Field(None, alias="brandSettings")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "prompt": "Announce our spring sale to existing customers",
                "contentType": "email",
                "brandSettings": {"tone": "friendly", "targetAudience": "small business owners"},
            }
        },
    )


class OptimizeContentBody(_Body):
    content: Optional[str] = Field(None, description="Copy to optimize")
    optimization_type: Optional[str] = Field(
        None, alias="optimizationType", description="engagement, conversion, readability or professional"
    )


class CreateCampaignBody(_Body):
    prompt: Optional[str] = Field(None, description="Campaign idea or theme")
    type: Optional[str] = Field(None, description="email, social, ad or blog")
    name: Optional[str] = Field(None, description="Campaign name; derived from the subject when omitted")
    brand_settings: Optional[Dict[str, Any]] = Field(None, alias="brandSettings")


class ForecastBody(_Body):
    sales_data: Optional[Any] = Field(None, alias="salesData", description="Historical sales data")
    context: Optional[str] = Field(None, description="Business context")


@router.post("/ai/generate")
async def generate_content(
    body: GenerateContentBody,
    service: GenerationService = Depends(get_generation_service),
):
    """Generate marketing copy with multi-model fallback."""
    result = await service.generate_content(body.prompt, body.content_type, body.brand_settings)
    return {"success": True, **result.model_dump(mode="json")}


@router.post("/ai/optimize")
async def optimize_content(
    body: OptimizeContentBody,
    service: GenerationService = Depends(get_generation_service),
):
    """Rewrite existing copy toward an optimization objective."""
    result = await service.optimize_content(body.content, body.optimization_type)
    return {"success": True, **result.model_dump(mode="json")}


@router.post("/campaigns", status_code=status.HTTP_201_CREATED)
async def create_campaign(
    body: CreateCampaignBody,
    user_id: Optional[str] = Header(None, alias="X-User-ID"),
    service: GenerationService = Depends(get_generation_service),
):
    """Draft a campaign; the caller's store persists the returned record."""
    result = await service.generate_campaign_draft(
        body.prompt, body.type, body.brand_settings, user_id, name=body.name
    )
    return {
        "success": True,
        "message": "Campaign draft generated",
        "campaign": result.model_dump(mode="json"),
    }


@router.post("/forecast")
async def generate_forecast(
    body: ForecastBody,
    service: GenerationService = Depends(get_generation_service),
):
    """Produce a sales forecast from historical data."""
    result = await service.generate_sales_forecast(body.sales_data, body.context)
    return {"success": True, **result.model_dump(mode="json")}
