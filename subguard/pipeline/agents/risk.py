"""Risk stage: monetary impact, risk level and urgency per anomaly."""

import structlog

from subguard.alerts.models import Severity
from subguard.pipeline.calc import round_half_up
from subguard.pipeline.schemas import (
    Anomaly,
    DuplicateServiceData,
    PriceIncreaseData,
    RiskAssessment,
    TrialToPaidData,
    UnusedSubscriptionData,
    UpcomingRenewalData,
)
from subguard.subscriptions.models import BillingCycle

logger = structlog.get_logger()

HIGH_YEARLY_LOSS = 30000
HIGH_MONTHLY_LOSS = 3000
MEDIUM_YEARLY_LOSS = 10000
MEDIUM_MONTHLY_LOSS = 1000


def _normalise(amount: float, billing_cycle: BillingCycle) -> tuple[float, float]:
    """Return (monthly, yearly) for an amount charged once per billing cycle."""
    if billing_cycle == BillingCycle.monthly:
        return amount, amount * 12
    return amount / 12, amount


def estimate_losses(anomaly: Anomaly) -> tuple[float, float]:
    """Unrounded (monthly, yearly) loss for an anomaly."""
    match anomaly.data:
        case PriceIncreaseData(old_amount=old, new_amount=new, billing_cycle=cycle):
            return _normalise(new - old, cycle)
        case UnusedSubscriptionData(amount=amount, billing_cycle=cycle):
            return _normalise(amount, cycle)
        case TrialToPaidData(amount=amount, billing_cycle=cycle):
            return _normalise(amount, cycle)
        case UpcomingRenewalData(amount=amount):
            return 0.0, amount
        case DuplicateServiceData(total_monthly_cost=total):
            # Consolidating roughly halves the combined cost; yearly is the
            # rounded monthly figure times twelve (1129 -> 565 -> 6780).
            monthly = round_half_up(total / 2)
            return monthly, monthly * 12
        case _:
            return 0.0, 0.0


def classify_risk(monthly_loss: float, yearly_loss: float) -> Severity:
    if yearly_loss >= HIGH_YEARLY_LOSS or monthly_loss >= HIGH_MONTHLY_LOSS:
        return Severity.high
    if yearly_loss >= MEDIUM_YEARLY_LOSS or monthly_loss >= MEDIUM_MONTHLY_LOSS:
        return Severity.medium
    return Severity.low


def score_urgency(anomaly: Anomaly, risk_level: Severity) -> int:
    """Urgency from 1 (whenever) to 5 (act today)."""
    if isinstance(anomaly.data, UpcomingRenewalData):
        days = anomaly.data.days_until_renewal
        if days <= 1:
            return 5
        if days <= 3:
            return 4
        return 3
    if risk_level == Severity.high:
        return 4
    if risk_level == Severity.medium:
        return 2
    return 1


class RiskPredictionAgent:
    name = "Risk Prediction Agent"

    def assess(self, anomalies: list[Anomaly]) -> list[RiskAssessment]:
        assessments: list[RiskAssessment] = []
        for anomaly in anomalies:
            monthly, yearly = estimate_losses(anomaly)
            # Classified on unrounded amounts; reported rounded.
            risk_level = classify_risk(monthly, yearly)
            assessments.append(
                RiskAssessment(
                    anomaly=anomaly,
                    monthly_loss=round_half_up(monthly),
                    yearly_loss=round_half_up(yearly),
                    risk_level=risk_level,
                    urgency=score_urgency(anomaly, risk_level),
                )
            )

        # sort() is stable: equal keys keep detection order.
        assessments.sort(key=lambda a: (-a.urgency, -a.yearly_loss))

        logger.info(
            "risk_assessment_complete",
            assessed=len(assessments),
            total_yearly_loss=sum(a.yearly_loss for a in assessments),
        )
        return assessments
