"""Reasoning stage: attach human-readable text to each risk assessment."""

import structlog

from subguard.pipeline.explainers import ExplanationProvider
from subguard.pipeline.schemas import ReasonedAlert, RiskAssessment

logger = structlog.get_logger()


class ReasoningAgent:
    name = "Reasoning Agent"

    def __init__(self, provider: ExplanationProvider) -> None:
        self._provider = provider

    async def explain(self, assessments: list[RiskAssessment]) -> list[ReasonedAlert]:
        reasoned: list[ReasonedAlert] = []
        for assessment in assessments:
            explanation = await self._provider.explain(assessment)
            reasoned.append(
                ReasonedAlert(
                    assessment=assessment,
                    title=explanation.title,
                    description=explanation.description,
                    ai_explanation=explanation.ai_explanation,
                    recommendation=explanation.recommendation,
                )
            )

        logger.info("explanations_generated", count=len(reasoned))
        return reasoned
