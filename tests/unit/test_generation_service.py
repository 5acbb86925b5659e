"""Test generation use cases end to end against a scripted provider."""

import pytest

from marketmind_ai.exceptions import (
    DraftInvalidError,
    ForecastError,
    GenerationError,
    OptimizationError,
    UpstreamError,
    ValidationError,
)
from marketmind_ai.orchestrator import FallbackChainRunner, ModelRole
from marketmind_ai.schemas.generation import ContentType, GenerationKind, GenerationRequest, OptimizationType
from marketmind_ai.services.generation_service import GenerationService

CAMPAIGN_TEXT = (
    "SUBJECT: Spring into savings\n"
    "BODY:\nOur biggest sale of the season starts today.\n"
    "VARIATIONS:\n- Spring sale is here\n- Save big this spring\n"
    "CTA:\nShop the sale"
)


@pytest.fixture
def fast_service(provider, registry, single_shot_retry, metrics, health_monitor):
    """Service whose models get exactly one attempt each."""
    return GenerationService(
        provider, registry, FallbackChainRunner(single_shot_retry, metrics=metrics), health_monitor=health_monitor
    )


def fail_models(provider, *identifiers):
    for identifier in identifiers:
        provider.fail_always(identifier, UpstreamError(f"{identifier} unavailable"))


class TestGenerateContent:
    @pytest.mark.asyncio
    async def test_success_on_primary(self, service, provider):
        result = await service.generate_content("Announce our spring sale", "email")

        assert result.content == "Generated marketing copy"
        assert result.model_used.identifier == "primary-70b"
        assert result.fallback_used is False
        assert result.rank == 1
        assert result.tokens_used == 42
        assert result.content_type is ContentType.EMAIL
        assert result.word_count == 3
        assert result.character_count == len("Generated marketing copy")
        assert provider.called_models == ["primary-70b"]

    @pytest.mark.asyncio
    async def test_request_shape(self, service, provider):
        await service.generate_content(
            "  Announce our spring sale  ", "social", {"tone": "playful", "targetAudience": "students"}
        )

        request = provider.calls[0]
        assert request.max_tokens == 400
        assert request.temperature == 0.7
        assert request.top_p == 0.9
        assert request.messages[0].role == "system"
        assert "social content" in request.messages[0].content
        assert "Tone: playful" in request.messages[0].content
        assert "Target Audience: students" in request.messages[0].content
        assert request.messages[1].content == "Announce our spring sale"

    @pytest.mark.asyncio
    async def test_blog_gets_larger_token_budget(self, service, provider):
        await service.generate_content("Write about CRM trends", ContentType.BLOG)

        assert provider.calls[0].max_tokens == 800

    @pytest.mark.asyncio
    async def test_falls_back_to_second_model(self, fast_service, provider):
        fail_models(provider, "primary-70b")

        result = await fast_service.generate_content("Announce our sale", "ad")

        assert result.model_used.identifier == "alternative-70b"
        assert result.fallback_used is True
        assert result.rank == 2
        assert provider.called_models == ["primary-70b", "alternative-70b"]

    @pytest.mark.asyncio
    async def test_all_models_fail(self, fast_service, provider):
        fail_models(provider, "primary-70b", "alternative-70b", "fallback-8b")

        with pytest.raises(GenerationError) as exc_info:
            await fast_service.generate_content("Announce our sale", "email")

        message = str(exc_info.value)
        assert message.startswith("Content generation failed")
        for identifier in ("primary-70b", "alternative-70b", "fallback-8b"):
            assert identifier in message
        assert exc_info.value.status_code == 502
        assert len(exc_info.value.failures) == 3

    @pytest.mark.asyncio
    async def test_invalid_content_type_makes_no_upstream_call(self, service, provider):
        with pytest.raises(ValidationError) as exc_info:
            await service.generate_content("Make a video script", "video")

        assert exc_info.value.field == "contentType"
        assert provider.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prompt", [None, "", "   ", 42])
    async def test_empty_prompt_rejected(self, service, provider, prompt):
        with pytest.raises(ValidationError) as exc_info:
            await service.generate_content(prompt, "email")

        assert exc_info.value.field == "prompt"
        assert provider.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "brand_settings", [{"tone": 5}, {"targetAudience": ["smb"]}, "bold", ["professional"]]
    )
    async def test_malformed_brand_settings_rejected(self, service, provider, brand_settings):
        with pytest.raises(ValidationError) as exc_info:
            await service.generate_content("Write an email", "email", brand_settings)

        assert exc_info.value.field == "brandSettings"
        assert exc_info.value.status_code == 400
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_malformed_brand_settings_rejected_for_campaign(self, service, provider):
        with pytest.raises(ValidationError) as exc_info:
            await service.generate_campaign_draft("Spring sale", "email", {"style": {"x": 1}}, "user-1")

        assert exc_info.value.field == "brandSettings"
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_unavailable_model_demoted_after_probe(self, fast_service, provider, health_monitor):
        fail_models(provider, "primary-70b")
        await health_monitor.probe_all()
        provider.calls.clear()

        result = await fast_service.generate_content("Announce our sale", "email")

        assert result.model_used.identifier == "alternative-70b"
        assert provider.called_models == ["alternative-70b"]

    @pytest.mark.asyncio
    async def test_health_aware_routing_can_be_disabled(
        self, provider, registry, single_shot_retry, metrics, health_monitor
    ):
        service = GenerationService(
            provider,
            registry,
            FallbackChainRunner(single_shot_retry, metrics=metrics),
            health_monitor=health_monitor,
            health_aware_routing=False,
        )
        fail_models(provider, "primary-70b")
        await health_monitor.probe_all()
        provider.calls.clear()

        await service.generate_content("Announce our sale", "email")

        assert provider.called_models == ["primary-70b", "alternative-70b"]


class TestGenerateCampaignDraft:
    @pytest.mark.asyncio
    async def test_draft_parsed_and_assembled(self, service, provider):
        provider.script("primary-70b", CAMPAIGN_TEXT)

        result = await service.generate_campaign_draft("Spring sale", "email", None, "user-1")

        assert result.content.subject == "Spring into savings"
        assert result.content.body == "Our biggest sale of the season starts today."
        assert result.content.variations == ["Spring sale is here", "Save big this spring"]
        assert result.content.call_to_action == "Shop the sale"
        assert result.name == "Spring into savings"
        assert result.status == "draft"
        assert result.user_id == "user-1"
        assert result.campaign_type is ContentType.EMAIL
        assert result.ai_metadata.model == "primary-70b"
        assert result.ai_metadata.prompt == "Spring sale"
        assert result.raw_text == CAMPAIGN_TEXT
        assert provider.calls[0].max_tokens == 800

    @pytest.mark.asyncio
    async def test_explicit_name_kept(self, service, provider):
        provider.script("primary-70b", CAMPAIGN_TEXT)

        result = await service.generate_campaign_draft("Spring sale", "email", None, "user-1", name="Q2 Promo")

        assert result.name == "Q2 Promo"

    @pytest.mark.asyncio
    async def test_name_derived_from_prompt_without_subject(self, service, provider):
        provider.script("primary-70b", "Just a body with no markers")
        prompt = "A long campaign idea about our brand new spring collection launch"

        result = await service.generate_campaign_draft(prompt, "social", None, "user-1")

        assert result.name == prompt[:40] + "..."
        assert result.content.body == "Just a body with no markers"

    @pytest.mark.asyncio
    async def test_draft_breaking_rules_raises(self, service, provider):
        provider.script("primary-70b", "SUBJECT: " + "x" * 250 + "\nBODY:\nHi")

        with pytest.raises(DraftInvalidError) as exc_info:
            await service.generate_campaign_draft("Spring sale", "email", None, "user-1", name="Spring")

        assert exc_info.value.status_code == 422
        assert exc_info.value.errors == ["Subject line must be 200 characters or less"]
        assert exc_info.value.raw_text.startswith("SUBJECT: ")
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_missing_user_rejected_before_upstream(self, service, provider):
        with pytest.raises(ValidationError) as exc_info:
            await service.generate_campaign_draft("Spring sale", "email", None, None)

        assert exc_info.value.field == "userId"
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_invalid_type_rejected(self, service, provider):
        with pytest.raises(ValidationError) as exc_info:
            await service.generate_campaign_draft("Spring sale", "podcast", None, "user-1")

        assert exc_info.value.field == "type"
        assert provider.calls == []


class TestGenerateSalesForecast:
    SALES = {"2024-Q1": 12000, "2024-Q2": 15500}

    @pytest.mark.asyncio
    async def test_forecast_returned_verbatim(self, service, provider):
        provider.script("primary-70b", "Q3 projection: 17,000")

        result = await service.generate_sales_forecast(self.SALES, "B2B SaaS, growing 10% QoQ")

        assert result.forecast == "Q3 projection: 17,000"
        assert result.sales_data_input == self.SALES
        assert result.business_context == "B2B SaaS, growing 10% QoQ"
        request = provider.calls[0]
        assert request.max_tokens == 1000
        assert request.temperature == 0.2
        assert '"2024-Q1": 12000' in request.messages[1].content

    @pytest.mark.asyncio
    async def test_forecast_chain_skips_fast_fallback(self, fast_service, provider):
        fail_models(provider, "primary-70b", "alternative-70b")

        with pytest.raises(ForecastError) as exc_info:
            await fast_service.generate_sales_forecast(self.SALES, "Retail")

        assert provider.called_models == ["primary-70b", "alternative-70b"]
        assert "fallback-8b" not in str(exc_info.value)
        assert exc_info.value.error_code == "FORECAST_FAILED"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sales_data", [None, "12000", 12000])
    async def test_sales_data_must_be_structured(self, service, provider, sales_data):
        with pytest.raises(ValidationError) as exc_info:
            await service.generate_sales_forecast(sales_data, "Retail")

        assert exc_info.value.field == "salesData"
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_context_required(self, service, provider):
        with pytest.raises(ValidationError) as exc_info:
            await service.generate_sales_forecast(self.SALES, "  ")

        assert exc_info.value.field == "context"
        assert provider.calls == []


class TestOptimizeContent:
    @pytest.mark.asyncio
    async def test_optimization(self, service, provider):
        provider.script("primary-70b", "Sharper copy")

        result = await service.optimize_content("Buy our stuff", "conversion")

        assert result.optimized_content == "Sharper copy"
        assert result.original_content == "Buy our stuff"
        assert result.optimization_type is OptimizationType.CONVERSION
        assert "conversion rates" in result.objective
        assert provider.calls[0].max_tokens == 600
        assert provider.calls[0].temperature == 0.6

    @pytest.mark.asyncio
    @pytest.mark.parametrize("optimization_type", [None, "virality"])
    async def test_unknown_objective_means_engagement(self, service, optimization_type):
        result = await service.optimize_content("Buy our stuff", optimization_type)

        assert result.optimization_type is OptimizationType.ENGAGEMENT

    @pytest.mark.asyncio
    async def test_exhaustion(self, fast_service, provider):
        fail_models(provider, "primary-70b", "alternative-70b")

        with pytest.raises(OptimizationError):
            await fast_service.optimize_content("Buy our stuff", "readability")

        assert provider.called_models == ["primary-70b", "alternative-70b"]

    @pytest.mark.asyncio
    async def test_empty_content_rejected(self, service, provider):
        with pytest.raises(ValidationError):
            await service.optimize_content("", "engagement")

        assert provider.calls == []


class TestGenerateDispatch:
    @pytest.mark.asyncio
    async def test_dispatch_by_kind(self, service, provider):
        provider.script("primary-70b", "copy", CAMPAIGN_TEXT, "forecast")

        content = await service.generate(
            GenerationRequest(kind=GenerationKind.CONTENT, prompt="p", content_type="email")
        )
        campaign = await service.generate(
            GenerationRequest(kind=GenerationKind.CAMPAIGN, prompt="p", content_type="email"), user_id="u"
        )
        forecast = await service.generate(
            GenerationRequest(kind=GenerationKind.FORECAST, sales_data={"jan": 1}, context="Retail")
        )

        assert content.content == "copy"
        assert campaign.content.subject == "Spring into savings"
        assert forecast.forecast == "forecast"

    def test_build_chain_roles(self, service):
        chain = service.build_chain((ModelRole.PRIMARY, ModelRole.ALTERNATIVE, ModelRole.FALLBACK))

        assert [m.identifier for m in chain] == ["primary-70b", "alternative-70b", "fallback-8b"]
