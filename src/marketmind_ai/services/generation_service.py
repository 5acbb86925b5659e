"""
Generation service: content, campaign drafts, sales forecasts and content optimization.

Every use case validates its input before any upstream call, then runs a
role-ordered fallback chain. Only chain exhaustion reaches the caller as an
upstream failure; per-model errors are absorbed by the chain.
"""

from typing import Any, Dict, List, Optional, Type, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from marketmind_ai.exceptions import (
    ChainExhaustedError,
    DraftInvalidError,
    ForecastError,
    GenerationError,
    OptimizationError,
    ValidationError,
)
from marketmind_ai.orchestrator.fallback_chain import CallBuilder, ChainOutcome, FallbackChainRunner
from marketmind_ai.orchestrator.health_monitor import HealthMonitor
from marketmind_ai.orchestrator.registry import ModelDescriptor, ModelRegistry, ModelRole
from marketmind_ai.orchestrator.response_parser import parse_campaign_draft
from marketmind_ai.providers.base import BaseProvider, ChatCompletionRequest, ChatMessage
from marketmind_ai.schemas.generation import (
    BrandSettings,
    CampaignAIMetadata,
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
from marketmind_ai.services import prompts
from marketmind_ai.services.validation import derive_campaign_name, validate_campaign

logger = structlog.get_logger()

CONTENT_CHAIN = (ModelRole.PRIMARY, ModelRole.ALTERNATIVE, ModelRole.FALLBACK)
CAMPAIGN_CHAIN = (ModelRole.PRIMARY, ModelRole.ALTERNATIVE, ModelRole.FALLBACK)
# Forecasting favours quality over availability: no fast fallback model
FORECAST_CHAIN = (ModelRole.PRIMARY, ModelRole.ALTERNATIVE)
OPTIMIZATION_CHAIN = (ModelRole.PRIMARY, ModelRole.ALTERNATIVE)

CONTENT_SAMPLING = {"temperature": 0.7, "top_p": 0.9, "frequency_penalty": 0.1, "presence_penalty": 0.1}
FORECAST_SAMPLING = {"temperature": 0.2, "top_p": 0.8, "frequency_penalty": 0.1, "presence_penalty": 0.1}
OPTIMIZATION_SAMPLING = {"temperature": 0.6, "top_p": 0.9, "frequency_penalty": 0.1}

BLOG_MAX_TOKENS = 800
DEFAULT_MAX_TOKENS = 400
CAMPAIGN_MAX_TOKENS = 800
FORECAST_MAX_TOKENS = 1000
OPTIMIZATION_MAX_TOKENS = 600


def _fail_validation(operation: str, message: str, field: str) -> None:
    logger.warning("validation_failed", operation=operation, field=field, error=message)
    raise ValidationError(message, field=field)


def _require_text(operation: str, value: Any, message: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        _fail_validation(operation, message, field)
    return value.strip()


def _require_content_type(operation: str, value: Any, field: str) -> ContentType:
    try:
        return ContentType(value)
    except (ValueError, TypeError):
        _fail_validation(
            operation, "Valid content type (email, social, ad, blog) is required", field
        )


def _brand(operation: str, brand_settings: Union[BrandSettings, Dict[str, Any], None]) -> BrandSettings:
    if isinstance(brand_settings, BrandSettings):
        return brand_settings
    if brand_settings is not None and not isinstance(brand_settings, dict):
        _fail_validation(operation, "Brand settings must be an object", "brandSettings")
    try:
        return BrandSettings.from_payload(brand_settings)
    except PydanticValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        _fail_validation(operation, f"Invalid brand settings: {fields}", "brandSettings")


class GenerationService:
    """Orchestrates prompts, fallback chains and response parsing."""

    def __init__(
        self,
        provider: BaseProvider,
        registry: ModelRegistry,
        chain_runner: FallbackChainRunner,
        health_monitor: Optional[HealthMonitor] = None,
        health_aware_routing: bool = True,
    ):
        self.provider = provider
        self.registry = registry
        self.chain_runner = chain_runner
        self.health_monitor = health_monitor
        self.health_aware_routing = health_aware_routing

    def build_chain(self, roles: tuple) -> List[ModelDescriptor]:
        """Models for ``roles``, reordered by the health monitor's advice when enabled."""
        chain = self.registry.chain(*roles)
        if self.health_monitor is not None and self.health_aware_routing:
            chain = self.health_monitor.order_chain(chain)
        return chain

    def _call_builder(self, messages: List[ChatMessage], max_tokens: int, **sampling) -> CallBuilder:
        def build(model: ModelDescriptor):
            request = ChatCompletionRequest(
                messages=messages, model=model.identifier, max_tokens=max_tokens, **sampling
            )

            async def operation():
                return await self.provider.chat_completion(request)

            return operation

        return build

    async def _run_chain(
        self,
        operation_name: str,
        roles: tuple,
        messages: List[ChatMessage],
        error_cls: Type[ChainExhaustedError],
        max_tokens: int,
        **sampling,
    ) -> ChainOutcome:
        outcome = await self.chain_runner.run(
            self.build_chain(roles),
            self._call_builder(messages, max_tokens, **sampling),
            operation_name=operation_name,
        )
        if not outcome.succeeded:
            raise error_cls(outcome.failures())
        return outcome

    @staticmethod
    def _outcome(outcome: ChainOutcome) -> GenerationOutcome:
        winner = outcome.winner
        return GenerationOutcome(
            content=outcome.result.content,
            model_used=winner.model,
            fallback_used=outcome.fallback_used,
            rank=outcome.rank,
            tokens_used=winner.tokens_used or 0,
        )

    async def generate_content(
        self,
        prompt: str,
        content_type: Union[ContentType, str],
        brand_settings: Union[BrandSettings, Dict[str, Any], None] = None,
    ) -> ContentResult:
        """Free-form marketing copy for one content type."""
        operation = "generate_content"
        prompt = _require_text(operation, prompt, "Prompt is required and cannot be empty", "prompt")
        content_type = _require_content_type(operation, content_type, "contentType")
        brand = _brand(operation, brand_settings)

        messages = [
            ChatMessage(role="system", content=prompts.content_system_prompt(content_type, brand)),
            ChatMessage(role="user", content=prompt),
        ]
        max_tokens = BLOG_MAX_TOKENS if content_type is ContentType.BLOG else DEFAULT_MAX_TOKENS
        outcome = await self._run_chain(
            operation, CONTENT_CHAIN, messages, GenerationError, max_tokens, **CONTENT_SAMPLING
        )

        result = self._outcome(outcome)
        content = result.content
        return ContentResult(
            **result.model_dump(),
            prompt=prompt,
            content_type=content_type,
            word_count=len(content.split()),
            character_count=len(content),
        )

    async def generate_campaign_draft(
        self,
        prompt: str,
        campaign_type: Union[ContentType, str],
        brand_settings: Union[BrandSettings, Dict[str, Any], None],
        user_id: Optional[str],
        name: Optional[str] = None,
    ) -> CampaignDraftResult:
        """Draft subject, body, variations and CTA for a new campaign.

        A draft that breaks campaign rules raises DraftInvalidError and is not
        regenerated; the caller decides whether to resubmit.
        """
        operation = "generate_campaign_draft"
        prompt = _require_text(operation, prompt, "Prompt is required", "prompt")
        campaign_type = _require_content_type(operation, campaign_type, "type")
        if user_id is None or not str(user_id).strip():
            _fail_validation(operation, "User ID required", "userId")
        brand = _brand(operation, brand_settings)

        messages = [
            ChatMessage(role="system", content=prompts.CAMPAIGN_SYSTEM_PROMPT),
            ChatMessage(role="user", content=prompts.campaign_prompt(prompt, campaign_type, brand)),
        ]
        outcome = await self._run_chain(
            operation, CAMPAIGN_CHAIN, messages, GenerationError, CAMPAIGN_MAX_TOKENS, **CONTENT_SAMPLING
        )
        result = self._outcome(outcome)

        draft = parse_campaign_draft(result.content)
        campaign_name = name.strip() if name and name.strip() else derive_campaign_name(draft.subject, prompt)

        errors = validate_campaign(campaign_name, campaign_type.value, draft)
        if errors:
            logger.warning(
                "draft_invalid",
                operation=operation,
                model=result.model_used.identifier,
                errors=errors,
            )
            raise DraftInvalidError(errors, raw_text=result.content)

        return CampaignDraftResult(
            user_id=str(user_id),
            name=campaign_name,
            campaign_type=campaign_type,
            content=draft,
            ai_metadata=CampaignAIMetadata(
                model=result.model_used.identifier,
                prompt=prompt,
                generated_at=result.generated_at,
            ),
            outcome=result,
            raw_text=result.content,
        )

    async def generate_sales_forecast(self, sales_data: Any, context: Optional[str]) -> ForecastResult:
        """Analytical forecast, returned verbatim."""
        operation = "generate_sales_forecast"
        if sales_data is None or not isinstance(sales_data, (dict, list)):
            _fail_validation(operation, "Valid sales data object is required", "salesData")
        context = _require_text(
            operation, context, "Business context is required for accurate forecasting", "context"
        )

        messages = [
            ChatMessage(role="system", content=prompts.FORECAST_SYSTEM_PROMPT),
            ChatMessage(role="user", content=prompts.forecast_prompt(sales_data, context)),
        ]
        outcome = await self._run_chain(
            operation, FORECAST_CHAIN, messages, ForecastError, FORECAST_MAX_TOKENS, **FORECAST_SAMPLING
        )
        result = self._outcome(outcome)

        return ForecastResult(
            forecast=result.content,
            model_used=result.model_used,
            fallback_used=result.fallback_used,
            tokens_used=result.tokens_used,
            generated_at=result.generated_at,
            sales_data_input=sales_data,
            business_context=context,
        )

    async def optimize_content(
        self,
        original_content: str,
        optimization_type: Union[OptimizationType, str, None] = None,
    ) -> OptimizationResult:
        """Rewrite existing copy toward one objective; unknown objectives mean engagement."""
        operation = "optimize_content"
        original_content = _require_text(
            operation, original_content, "Original content is required for optimization", "content"
        )
        try:
            optimization_type = OptimizationType(optimization_type)
        except (ValueError, TypeError):
            optimization_type = OptimizationType.ENGAGEMENT
        objective = prompts.OPTIMIZATION_OBJECTIVES[optimization_type]

        messages = [
            ChatMessage(role="system", content=prompts.optimization_system_prompt(objective)),
            ChatMessage(role="user", content=prompts.optimization_prompt(original_content, objective)),
        ]
        outcome = await self._run_chain(
            operation,
            OPTIMIZATION_CHAIN,
            messages,
            OptimizationError,
            OPTIMIZATION_MAX_TOKENS,
            **OPTIMIZATION_SAMPLING,
        )
        result = self._outcome(outcome)

        return OptimizationResult(
            original_content=original_content,
            optimized_content=result.content,
            optimization_type=optimization_type,
            objective=objective,
            model_used=result.model_used,
            tokens_used=result.tokens_used,
            generated_at=result.generated_at,
        )

    async def generate(self, request: GenerationRequest, user_id: Optional[str] = None):
        """Dispatch a GenerationRequest to its use case."""
        if request.kind is GenerationKind.CONTENT:
            return await self.generate_content(request.prompt, request.content_type, request.brand_settings)
        if request.kind is GenerationKind.CAMPAIGN:
            return await self.generate_campaign_draft(
                request.prompt, request.content_type, request.brand_settings, user_id
            )
        return await self.generate_sales_forecast(request.sales_data, request.context)
