"""Tests for the observation stage."""

from datetime import timedelta

from subguard.pipeline.agents import MonitoringAgent


def test_price_change_percentage(make_subscription, now):
    """Percentage is relative to the previous amount and rounded half up."""
    netflix = make_subscription(merchant="Netflix", current_amount=649, previous_amount=499)
    halfway = make_subscription(merchant="Halfway", current_amount=112.5, previous_amount=100)

    result = MonitoringAgent().observe([netflix, halfway], [], now)

    changes = {c.subscription.merchant: c for c in result.patterns.price_changes}
    assert changes["Netflix"].percentage_change == 30
    assert changes["Netflix"].old_amount == 499
    assert changes["Netflix"].new_amount == 649
    assert changes["Halfway"].percentage_change == 13


def test_price_decrease_is_observed(make_subscription, now):
    sub = make_subscription(current_amount=100, previous_amount=200)

    result = MonitoringAgent().observe([sub], [], now)

    assert [c.percentage_change for c in result.patterns.price_changes] == [-50]


def test_unchanged_or_missing_previous_amount_is_not_a_change(make_subscription, now):
    same = make_subscription(current_amount=119, previous_amount=119)
    missing = make_subscription(current_amount=119)

    result = MonitoringAgent().observe([same, missing], [], now)

    assert result.patterns.price_changes == []


def test_unused_threshold_is_inclusive(make_subscription, now):
    """Thirty whole days without use counts; twenty-nine does not."""
    subs = [
        make_subscription(merchant="A", last_used_date=now - timedelta(days=30)),
        make_subscription(merchant="B", last_used_date=now - timedelta(days=29, hours=23)),
        make_subscription(merchant="C", last_used_date=None),
        make_subscription(
            merchant="D", status="paused", last_used_date=now - timedelta(days=200)
        ),
    ]

    result = MonitoringAgent().observe(subs, [], now)

    unused = result.patterns.unused_subscriptions
    assert [(u.subscription.merchant, u.days_since_last_use) for u in unused] == [("A", 30)]


def test_upcoming_renewal_window(make_subscription, now):
    subs = [
        make_subscription(merchant="Today", next_billing_date=now),
        make_subscription(merchant="Week", next_billing_date=now + timedelta(days=7, hours=5)),
        make_subscription(merchant="Later", next_billing_date=now + timedelta(days=8)),
        make_subscription(merchant="Overdue", next_billing_date=now - timedelta(days=1)),
        make_subscription(
            merchant="Paused", status="paused", next_billing_date=now + timedelta(days=1)
        ),
    ]

    result = MonitoringAgent().observe(subs, [], now)

    renewals = result.patterns.upcoming_renewals
    assert [(r.subscription.merchant, r.days_until_renewal) for r in renewals] == [
        ("Today", 0),
        ("Week", 7),
    ]


def test_result_carries_inputs(make_subscription, now):
    subs = [make_subscription()]

    result = MonitoringAgent().observe(subs, [], now)

    assert result.subscriptions == subs
    assert result.transactions == []
