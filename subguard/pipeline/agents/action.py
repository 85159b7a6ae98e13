"""Recommendation stage: turn explained risks into alerts awaiting user approval.

Nothing here mutates a subscription. Every recommendation carries
``requires_user_approval=True`` and the only write is the alert itself, which
is skipped when an alert for the same (merchant, type) already exists.
"""

from datetime import datetime

import structlog

from subguard.alerts.models import AnomalyType, Severity
from subguard.alerts.schemas import AlertCreate, FinancialImpact
from subguard.pipeline.schemas import (
    ActionOutcome,
    ActionRecommendation,
    PriceIncreaseData,
    ReasonedAlert,
)
from subguard.store import SubscriptionStore

logger = structlog.get_logger()

_AVAILABLE_ACTIONS: dict[AnomalyType, list[str]] = {
    AnomalyType.price_increase: ["Keep subscription", "Cancel auto-pay", "Dismiss"],
    AnomalyType.unused_subscription: [
        "Continue",
        "Pause subscription",
        "Cancel subscription",
        "Dismiss",
    ],
    AnomalyType.upcoming_renewal: [
        "Allow renewal",
        "Cancel before renewal",
        "Set reminder",
        "Dismiss",
    ],
    AnomalyType.duplicate_service: ["Keep all", "Compare and choose one", "Dismiss"],
}
_DEFAULT_ACTIONS = ["Continue", "Cancel", "Dismiss"]


def available_actions(anomaly_type: AnomalyType) -> list[str]:
    return list(_AVAILABLE_ACTIONS.get(anomaly_type, _DEFAULT_ACTIONS))


def suggest_action(anomaly_type: AnomalyType, severity: Severity) -> str:
    match anomaly_type:
        case AnomalyType.price_increase:
            return "Cancel auto-pay" if severity == Severity.high else "Review and decide"
        case AnomalyType.unused_subscription:
            return "Cancel subscription" if severity == Severity.high else "Pause subscription"
        case AnomalyType.upcoming_renewal:
            return "Review usage before renewal"
        case AnomalyType.duplicate_service:
            return "Compare and choose one"
        case _:
            return "Review"


class ActionRecommendationAgent:
    name = "Action Recommendation Agent"

    def recommend(
        self, reasoned_alerts: list[ReasonedAlert], now: datetime
    ) -> list[ActionRecommendation]:
        recommendations = [self._build(reasoned, now) for reasoned in reasoned_alerts]
        logger.info("recommendations_built", count=len(recommendations))
        return recommendations

    async def act(
        self,
        reasoned_alerts: list[ReasonedAlert],
        store: SubscriptionStore,
        now: datetime,
    ) -> ActionOutcome:
        recommendations = self.recommend(reasoned_alerts, now)
        new_alerts = await self.persist(recommendations, store)
        total_savings = sum(rec.alert.financial_impact.yearly for rec in recommendations)
        return ActionOutcome(
            recommendations=recommendations,
            new_alerts=new_alerts,
            total_potential_savings=total_savings,
        )

    async def persist(
        self, recommendations: list[ActionRecommendation], store: SubscriptionStore
    ) -> int:
        """Create alerts not already on record; returns how many were created."""
        existing = {alert.dedup_key for alert in await store.get_alerts()}

        created = 0
        for rec in recommendations:
            key = rec.alert.dedup_key
            if key in existing:
                continue
            # The store ignores the insert if another run got there first.
            if await store.create_alert(rec.alert) is not None:
                created += 1
            existing.add(key)

        logger.info(
            "alerts_persisted",
            recommendations=len(recommendations),
            new_alerts=created,
        )
        return created

    @staticmethod
    def _build(reasoned: ReasonedAlert, now: datetime) -> ActionRecommendation:
        assessment = reasoned.assessment
        anomaly = assessment.anomaly

        old_amount = new_amount = None
        if isinstance(anomaly.data, PriceIncreaseData):
            old_amount = anomaly.data.old_amount
            new_amount = anomaly.data.new_amount

        alert = AlertCreate(
            type=anomaly.type,
            severity=anomaly.severity,
            subscription_id=anomaly.subscription_id,
            merchant=anomaly.merchant,
            title=reasoned.title,
            description=reasoned.description,
            financial_impact=FinancialImpact(
                monthly=assessment.monthly_loss,
                yearly=assessment.yearly_loss,
            ),
            recommendation=reasoned.recommendation,
            ai_explanation=reasoned.ai_explanation,
            created_at=now,
            old_amount=old_amount,
            new_amount=new_amount,
        )
        suggested = suggest_action(anomaly.type, anomaly.severity)
        logger.info(
            "action_suggested",
            merchant=anomaly.merchant,
            suggested_action=suggested,
            requires_user_approval=True,
        )
        return ActionRecommendation(
            alert=alert,
            available_actions=available_actions(anomaly.type),
            suggested_action=suggested,
            risk_level=assessment.risk_level,
            urgency=assessment.urgency,
        )
