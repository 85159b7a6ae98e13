"""Tests for recommendations and alert persistence."""

import pytest

from subguard.alerts.models import AlertStatus, AnomalyType, Severity
from subguard.alerts.schemas import AlertUpdate
from subguard.pipeline.agents import ActionRecommendationAgent
from subguard.pipeline.agents.action import available_actions, suggest_action
from subguard.pipeline.schemas import (
    Anomaly,
    PriceIncreaseData,
    ReasonedAlert,
    RiskAssessment,
    UnusedSubscriptionData,
)
from subguard.subscriptions.models import BillingCycle


def reasoned(anomaly_type, data, merchant, severity, monthly, yearly, risk=Severity.low):
    return ReasonedAlert(
        assessment=RiskAssessment(
            anomaly=Anomaly(
                type=anomaly_type,
                subscription_id=f"sub-{merchant}",
                merchant=merchant,
                severity=severity,
                data=data,
            ),
            monthly_loss=monthly,
            yearly_loss=yearly,
            risk_level=risk,
            urgency=1,
        ),
        title=f"{merchant} title",
        description=f"{merchant} description",
        ai_explanation=f"{merchant} explanation",
        recommendation=f"{merchant} recommendation",
    )


@pytest.fixture
def netflix_price():
    return reasoned(
        AnomalyType.price_increase,
        PriceIncreaseData(
            old_amount=499,
            new_amount=649,
            percentage_change=30,
            billing_cycle=BillingCycle.monthly,
        ),
        merchant="Netflix",
        severity=Severity.high,
        monthly=150,
        yearly=1800,
    )


@pytest.fixture
def adobe_unused():
    return reasoned(
        AnomalyType.unused_subscription,
        UnusedSubscriptionData(
            days_since_last_use=90, amount=4999, billing_cycle=BillingCycle.monthly
        ),
        merchant="Adobe Creative",
        severity=Severity.high,
        monthly=4999,
        yearly=59988,
        risk=Severity.high,
    )


def test_recommendation_builds_pending_alert(netflix_price, now):
    (rec,) = ActionRecommendationAgent().recommend([netflix_price], now)

    assert rec.requires_user_approval is True
    assert rec.suggested_action == "Cancel auto-pay"
    assert rec.available_actions == ["Keep subscription", "Cancel auto-pay", "Dismiss"]
    alert = rec.alert
    assert alert.type == AnomalyType.price_increase
    assert alert.severity == Severity.high
    assert alert.status == AlertStatus.pending
    assert alert.subscription_id == "sub-Netflix"
    assert (alert.old_amount, alert.new_amount) == (499, 649)
    assert (alert.financial_impact.monthly, alert.financial_impact.yearly) == (150, 1800)
    assert alert.created_at == now


def test_amounts_only_on_price_increase(adobe_unused, now):
    (rec,) = ActionRecommendationAgent().recommend([adobe_unused], now)

    assert rec.alert.old_amount is None
    assert rec.alert.new_amount is None
    assert rec.suggested_action == "Cancel subscription"
    assert rec.risk_level == Severity.high


def test_recommendation_serialises_camel_case(netflix_price, now):
    (rec,) = ActionRecommendationAgent().recommend([netflix_price], now)

    payload = rec.model_dump(by_alias=True)

    assert payload["requiresUserApproval"] is True
    assert payload["suggestedAction"] == "Cancel auto-pay"
    assert payload["alert"]["aiExplanation"] == "Netflix explanation"


@pytest.mark.parametrize(
    ("anomaly_type", "severity", "expected"),
    [
        (AnomalyType.price_increase, Severity.medium, "Review and decide"),
        (AnomalyType.unused_subscription, Severity.medium, "Pause subscription"),
        (AnomalyType.unused_subscription, Severity.low, "Pause subscription"),
        (AnomalyType.upcoming_renewal, Severity.high, "Review usage before renewal"),
        (AnomalyType.duplicate_service, Severity.low, "Compare and choose one"),
        (AnomalyType.trial_to_paid, Severity.medium, "Review"),
    ],
)
def test_suggested_action(anomaly_type, severity, expected):
    assert suggest_action(anomaly_type, severity) == expected


def test_unknown_type_gets_default_actions():
    assert available_actions(AnomalyType.trial_to_paid) == ["Continue", "Cancel", "Dismiss"]


async def test_act_persists_and_totals_savings(store, netflix_price, adobe_unused, now):
    outcome = await ActionRecommendationAgent().act([netflix_price, adobe_unused], store, now)

    assert outcome.new_alerts == 2
    assert outcome.total_potential_savings == 1800 + 59988
    alerts = await store.get_alerts()
    assert {a.merchant for a in alerts} == {"Netflix", "Adobe Creative"}


async def test_existing_alert_is_not_duplicated(store, netflix_price, adobe_unused, now):
    agent = ActionRecommendationAgent()
    await agent.act([netflix_price], store, now)

    outcome = await agent.act([netflix_price, adobe_unused], store, now)

    assert outcome.new_alerts == 1
    assert len(outcome.recommendations) == 2
    assert outcome.total_potential_savings == 1800 + 59988
    assert len(await store.get_alerts()) == 2


async def test_resolved_alert_still_blocks_recreation(store, netflix_price, now):
    """Deduplication covers every status, not just pending alerts."""
    agent = ActionRecommendationAgent()
    await agent.act([netflix_price], store, now)
    (alert,) = await store.get_alerts()
    await store.update_alert(alert.id, AlertUpdate(status=AlertStatus.resolved))

    outcome = await agent.act([netflix_price], store, now)

    assert outcome.new_alerts == 0


async def test_same_key_twice_in_one_batch_creates_one_alert(store, netflix_price, now):
    outcome = await ActionRecommendationAgent().act([netflix_price, netflix_price], store, now)

    assert outcome.new_alerts == 1
