"""Tests for loss estimation, risk levels and urgency ordering."""

import pytest

from subguard.alerts.models import AnomalyType, Severity
from subguard.pipeline.agents import RiskPredictionAgent
from subguard.pipeline.agents.risk import classify_risk
from subguard.pipeline.calc import round_half_up
from subguard.pipeline.schemas import (
    Anomaly,
    DuplicateMember,
    DuplicateServiceData,
    PriceIncreaseData,
    TrialToPaidData,
    UnusedSubscriptionData,
    UpcomingRenewalData,
)
from subguard.subscriptions.models import BillingCycle


def anomaly(anomaly_type, data, merchant="Acme", severity=Severity.medium):
    return Anomaly(
        type=anomaly_type,
        subscription_id=f"sub-{merchant}",
        merchant=merchant,
        severity=severity,
        data=data,
    )


def assess_one(item):
    (assessment,) = RiskPredictionAgent().assess([item])
    return assessment


def test_monthly_price_increase():
    item = anomaly(
        AnomalyType.price_increase,
        PriceIncreaseData(
            old_amount=499,
            new_amount=649,
            percentage_change=30,
            billing_cycle=BillingCycle.monthly,
        ),
        merchant="Netflix",
    )

    result = assess_one(item)

    assert (result.monthly_loss, result.yearly_loss) == (150, 1800)
    assert result.risk_level == Severity.low
    assert result.urgency == 1


def test_yearly_price_increase_is_spread_over_months():
    item = anomaly(
        AnomalyType.price_increase,
        PriceIncreaseData(
            old_amount=1200,
            new_amount=1500,
            percentage_change=25,
            billing_cycle=BillingCycle.yearly,
        ),
    )

    result = assess_one(item)

    assert (result.monthly_loss, result.yearly_loss) == (25, 300)


def test_expensive_unused_subscription_is_high_risk():
    item = anomaly(
        AnomalyType.unused_subscription,
        UnusedSubscriptionData(
            days_since_last_use=90, amount=4999, billing_cycle=BillingCycle.monthly
        ),
        merchant="Adobe Creative",
        severity=Severity.high,
    )

    result = assess_one(item)

    assert (result.monthly_loss, result.yearly_loss) == (4999, 59988)
    assert result.risk_level == Severity.high
    assert result.urgency == 4


def test_duplicate_service_halves_combined_cost():
    item = anomaly(
        AnomalyType.duplicate_service,
        DuplicateServiceData(
            category="Storage",
            subscriptions=(
                DuplicateMember(id="a", merchant="Dropbox", amount=999),
                DuplicateMember(id="b", merchant="Google One", amount=130),
            ),
            total_monthly_cost=1129,
        ),
        merchant="Dropbox, Google One",
        severity=Severity.low,
    )

    result = assess_one(item)

    assert (result.monthly_loss, result.yearly_loss) == (565, 6780)
    assert result.risk_level == Severity.low


@pytest.mark.parametrize(("days", "urgency"), [(0, 5), (1, 5), (2, 4), (3, 4), (5, 3), (7, 3)])
def test_renewal_urgency_follows_days_left(days, urgency):
    item = anomaly(
        AnomalyType.upcoming_renewal,
        UpcomingRenewalData(days_until_renewal=days, amount=1499),
    )

    result = assess_one(item)

    assert (result.monthly_loss, result.yearly_loss) == (0, 1499)
    assert result.urgency == urgency


def test_trial_to_paid_counts_the_full_charge():
    item = anomaly(
        AnomalyType.trial_to_paid,
        TrialToPaidData(amount=299, billing_cycle=BillingCycle.monthly),
    )

    result = assess_one(item)

    assert (result.monthly_loss, result.yearly_loss) == (299, 3588)


@pytest.mark.parametrize(
    ("monthly", "yearly", "expected"),
    [
        (0, 9999, Severity.low),
        (0, 10000, Severity.medium),
        (1000, 0, Severity.medium),
        (2999, 29999, Severity.medium),
        (3000, 0, Severity.high),
        (0, 30000, Severity.high),
    ],
)
def test_classify_risk_boundaries(monthly, yearly, expected):
    assert classify_risk(monthly, yearly) == expected


def test_sorted_by_urgency_then_yearly_loss():
    def unused(merchant, amount):
        return anomaly(
            AnomalyType.unused_subscription,
            UnusedSubscriptionData(
                days_since_last_use=45, amount=amount, billing_cycle=BillingCycle.monthly
            ),
            merchant=merchant,
        )

    renewal = anomaly(
        AnomalyType.upcoming_renewal,
        UpcomingRenewalData(days_until_renewal=1, amount=999),
        merchant="Renewal",
    )
    items = [unused("Small", 100), unused("Tie-1", 200), renewal, unused("Big", 900)]
    items.append(unused("Tie-2", 200))

    merchants = [a.anomaly.merchant for a in RiskPredictionAgent().assess(items)]

    assert merchants == ["Renewal", "Big", "Tie-1", "Tie-2", "Small"]


def test_round_half_up():
    assert round_half_up(564.5) == 565
    assert round_half_up(124.9) == 125
    assert round_half_up(124.4) == 124
    assert round_half_up(0.5) == 1
