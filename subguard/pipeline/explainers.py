"""Explanation providers for the reasoning stage.

``TemplateExplanationProvider`` is deterministic and total: every anomaly type,
known or not, renders non-empty text. ``GenerativeExplanationProvider`` asks a
chat model for the same four fields and falls back to the templates, per field
when a field is missing and wholesale on any failure or timeout. The provider
is chosen once, when the pipeline is wired, by ``build_explanation_provider``.
"""

import asyncio
import json
import re
from abc import ABC, abstractmethod
from dataclasses import asdict

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from pydantic import BaseModel, ConfigDict, Field

from subguard.alerts.models import AnomalyType
from subguard.config import settings
from subguard.exceptions import ExplanationError
from subguard.pipeline.prompts import EXPLANATION_PROMPT
from subguard.pipeline.schemas import (
    DuplicateServiceData,
    Explanation,
    PriceIncreaseData,
    RiskAssessment,
    UnusedSubscriptionData,
    UpcomingRenewalData,
)

logger = structlog.get_logger()

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
URGENT_RENEWAL_DAYS = 2


class ExplanationProvider(ABC):
    @abstractmethod
    async def explain(self, assessment: RiskAssessment) -> Explanation:
        """Return title, description, explanation and recommendation for one risk."""


class TemplateExplanationProvider(ExplanationProvider):
    def __init__(self, currency: str | None = None) -> None:
        self._currency = currency if currency is not None else settings.currency_symbol

    async def explain(self, assessment: RiskAssessment) -> Explanation:
        return self.render(assessment)

    def render(self, assessment: RiskAssessment) -> Explanation:
        anomaly = assessment.anomaly
        merchant = anomaly.merchant
        c = self._currency
        monthly = assessment.monthly_loss
        yearly = assessment.yearly_loss

        match anomaly.type, anomaly.data:
            case AnomalyType.price_increase, PriceIncreaseData(percentage_change=pct):
                return Explanation(
                    title=f"{merchant} Price Increase Detected",
                    description=(
                        f"{merchant} increased its price by {pct}%, "
                        f"costing you {c}{yearly} more per year."
                    ),
                    ai_explanation=(
                        f"Our AI detected a {pct}% price increase on your {merchant} "
                        "subscription. This silent increase happened without direct "
                        f"notification. Over the next year, you'll pay {c}{yearly} more than "
                        f"before. This is a {assessment.risk_level} risk alert that requires "
                        "your attention."
                    ),
                    recommendation=(
                        "Review if the service still provides value at this price, "
                        "consider alternatives or cancelling."
                    ),
                )

            case AnomalyType.unused_subscription, UnusedSubscriptionData(
                days_since_last_use=days
            ):
                return Explanation(
                    title=f"{merchant} Unused for {days} Days",
                    description=(
                        f"You haven't used {merchant} in {days} days but are still being "
                        f"charged {c}{monthly}/month."
                    ),
                    ai_explanation=(
                        f"Your {merchant} subscription has been inactive for {days} days. "
                        f"At {c}{monthly}/month, this costs you {c}{yearly}/year for a service "
                        "you're not using. This represents silent financial leakage that many "
                        "users overlook."
                    ),
                    recommendation=(
                        "Consider pausing or cancelling this subscription to save money."
                    ),
                )

            case AnomalyType.upcoming_renewal, UpcomingRenewalData(days_until_renewal=days):
                if days <= URGENT_RENEWAL_DAYS:
                    recommendation = (
                        "Urgent: Decide now if you want to keep or cancel before auto-renewal."
                    )
                else:
                    recommendation = "Review your usage and decide if you want to continue."
                return Explanation(
                    title=f"{merchant} Annual Renewal in {days} Days",
                    description=(
                        f"Your {merchant} subscription will auto-renew for {c}{yearly} "
                        f"in {days} days."
                    ),
                    ai_explanation=(
                        f"Your annual {merchant} subscription is about to auto-renew. "
                        f"The charge of {c}{yearly} will be deducted automatically. Now is the "
                        "time to decide if you want to continue this service for another year."
                    ),
                    recommendation=recommendation,
                )

            case AnomalyType.duplicate_service, DuplicateServiceData(category=category):
                return Explanation(
                    title=f"Multiple {category} Subscriptions",
                    description=(
                        f"You have multiple subscriptions in the {category} category "
                        "that may overlap."
                    ),
                    ai_explanation=(
                        "Our AI detected multiple active subscriptions in the "
                        f"{category} category: {merchant}. Having overlapping services costs "
                        f"you {c}{yearly}/year in potential waste. Consider if you need all "
                        "of them."
                    ),
                    recommendation="Compare features and keep only the one you use most.",
                )

            case _:
                return Explanation(
                    title=f"Alert for {merchant}",
                    description=f"Potential issue detected with your {merchant} subscription.",
                    ai_explanation=(
                        f"Our AI flagged a potential issue with your {merchant} subscription "
                        f"worth {c}{yearly}/year."
                    ),
                    recommendation="Review this subscription and take appropriate action.",
                )


class ExplanationDraft(BaseModel):
    """Fields a model response may supply; anything absent is filled from the template."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str | None = None
    description: str | None = None
    ai_explanation: str | None = Field(default=None, alias="aiExplanation")
    recommendation: str | None = None


def parse_explanation(text: str) -> ExplanationDraft:
    """Pull the JSON object out of a free-form model response."""
    match = _JSON_OBJECT.search(text)
    if match is None:
        raise ExplanationError("No JSON object in model response")
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ExplanationError(f"Malformed JSON in model response: {exc}") from exc
    if not isinstance(payload, dict):
        raise ExplanationError("Model response JSON is not an object")
    return ExplanationDraft.model_validate(payload)


def message_text(content: str | list) -> str:
    """Plain text of a chat message whose content may be a list of content blocks."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def _prefer(value: str | None, fallback: str) -> str:
    if value is None or not value.strip():
        return fallback
    return value.strip()


class GenerativeExplanationProvider(ExplanationProvider):
    def __init__(
        self,
        llm: BaseChatModel,
        fallback: TemplateExplanationProvider,
        timeout_seconds: float,
        currency: str | None = None,
    ) -> None:
        self._llm = llm
        self._fallback = fallback
        self._timeout = timeout_seconds
        self._currency = currency if currency is not None else settings.currency_symbol

    async def explain(self, assessment: RiskAssessment) -> Explanation:
        template = self._fallback.render(assessment)
        merchant = assessment.anomaly.merchant

        try:
            draft = await asyncio.wait_for(self._generate(assessment), timeout=self._timeout)
        except Exception as exc:
            logger.warning(
                "explanation_llm_fallback",
                merchant=merchant,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return template

        logger.info("explanation_llm_generated", merchant=merchant)
        return Explanation(
            title=_prefer(draft.title, template.title),
            description=_prefer(draft.description, template.description),
            ai_explanation=_prefer(draft.ai_explanation, template.ai_explanation),
            recommendation=_prefer(draft.recommendation, template.recommendation),
        )

    async def _generate(self, assessment: RiskAssessment) -> ExplanationDraft:
        anomaly = assessment.anomaly
        prompt = EXPLANATION_PROMPT.format(
            anomaly_type=anomaly.type,
            merchant=anomaly.merchant,
            currency=self._currency,
            monthly_loss=assessment.monthly_loss,
            yearly_loss=assessment.yearly_loss,
            details=json.dumps(asdict(anomaly.data)),
        )
        response = await self._llm.ainvoke([HumanMessage(content=prompt)])
        return parse_explanation(message_text(response.content))


def build_explanation_provider() -> ExplanationProvider:
    """Pick the provider from configuration: generative when a key is set, else templates."""
    from subguard.llm.factory import LLMFactory

    templates = TemplateExplanationProvider()
    if not LLMFactory.is_configured():
        logger.info("explanation_provider_selected", mode="template")
        return templates

    logger.info(
        "explanation_provider_selected",
        mode="generative",
        provider=settings.llm_provider,
        model=settings.llm_model,
    )
    return GenerativeExplanationProvider(
        LLMFactory.create(),
        templates,
        timeout_seconds=settings.llm_timeout_seconds,
    )
