"""Prompt templates for the generation use cases."""

import json
from typing import Any

from marketmind_ai.schemas.generation import BrandSettings, ContentType, OptimizationType

CAMPAIGN_SYSTEM_PROMPT = "You are an expert AI marketing assistant."

FORECAST_SYSTEM_PROMPT = (
    "You are a senior sales forecasting analyst with expertise in predictive analytics "
    "and business intelligence. Analyze the provided data and generate accurate, "
    "actionable predictions."
)

OPTIMIZATION_OBJECTIVES = {
    OptimizationType.ENGAGEMENT: "maximize user engagement and click-through rates",
    OptimizationType.CONVERSION: "improve conversion rates and call-to-action effectiveness",
    OptimizationType.READABILITY: "enhance readability and comprehension",
    OptimizationType.PROFESSIONAL: "increase professionalism and credibility",
}


def _brand_block(brand: BrandSettings, default_guidelines: str) -> str:
    return (
        "Brand Guidelines:\n"
        f"- Tone: {brand.tone}\n"
        f"- Style: {brand.style}\n"
        f"- Target Audience: {brand.target_audience}\n"
        f"- Brand Guidelines: {brand.guidelines or default_guidelines}"
    )


def content_system_prompt(content_type: ContentType, brand: BrandSettings) -> str:
    return (
        "You are a professional marketing content creator specializing in "
        f"{content_type.value} content.\n\n"
        f"{_brand_block(brand, 'Focus on clear, engaging communication')}\n\n"
        "Create compelling, brand-aligned content that resonates with the target audience. "
        "Focus on clarity, engagement, and actionable messaging."
    )


def campaign_prompt(prompt: str, campaign_type: ContentType, brand: BrandSettings) -> str:
    return f"""You are a senior marketing strategist and copywriter.
Draft a complete {campaign_type.value} campaign for our business, based on the following idea:

Prompt/Theme: {prompt}

{_brand_block(brand, 'Focus on clear, actionable, engaging copy')}

Please generate:
1. Subject line (if applicable)
2. Main body content
3. 2-3 alternative subject lines or hooks for testing
4. Clear and actionable call-to-action

Format:
SUBJECT: ...
BODY:
...
VARIATIONS:
- ...
CTA:
...
"""


def forecast_prompt(sales_data: Any, context: str) -> str:
    data = json.dumps(sales_data, indent=2, default=str)
    return f"""SALES DATA ANALYSIS REQUEST:

Historical Sales Data:
{data}

Business Context: {context}

Please provide a comprehensive analysis including:

1. **NEXT QUARTER PREDICTIONS**
   - Specific revenue numbers with confidence ranges
   - Percentage growth/decline from previous periods
   - Seasonal factors and market conditions impact

2. **KEY TRENDS & FACTORS**
   - Primary growth drivers or concerns
   - Market condition influences
   - Historical pattern analysis

3. **CONFIDENCE ASSESSMENT**
   - Confidence level (1-10 scale) with detailed reasoning
   - Risk factors that could affect accuracy
   - Data quality and completeness assessment

4. **STRATEGIC RECOMMENDATIONS**
   - Three specific, actionable business recommendations
   - Resource allocation suggestions
   - Contingency planning advice

Format your response with clear headings and bullet points for easy reading."""


def optimization_system_prompt(objective: str) -> str:
    return (
        "You are a content optimization expert specializing in marketing copy. "
        f"Your goal is to {objective} while maintaining the core message and brand voice."
    )


def optimization_prompt(original_content: str, objective: str) -> str:
    return f"""CONTENT OPTIMIZATION REQUEST:

ORIGINAL CONTENT:
{original_content}

OPTIMIZATION OBJECTIVE: {objective}

REQUIREMENTS:
- Maintain the core message and intent
- Enhance clarity and impact
- Improve structure and flow
- Make it more compelling and actionable
- Preserve brand voice and tone

Please provide the optimized version followed by a brief explanation of the key improvements made."""
