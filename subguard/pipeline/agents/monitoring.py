"""Observation stage: derive price-change, unused and renewal patterns."""

from datetime import datetime

import structlog

from subguard.pipeline.calc import round_half_up, whole_days_between
from subguard.pipeline.schemas import (
    MonitoringResult,
    ObservedPatterns,
    PriceChange,
    UnusedSubscription,
    UpcomingRenewal,
)
from subguard.subscriptions.models import SubscriptionStatus
from subguard.subscriptions.schemas import Subscription
from subguard.transactions.schemas import Transaction

logger = structlog.get_logger()

UNUSED_DAYS_THRESHOLD = 30
RENEWAL_WINDOW_DAYS = 7


class MonitoringAgent:
    name = "Monitoring Agent"

    def observe(
        self,
        subscriptions: list[Subscription],
        transactions: list[Transaction],
        now: datetime,
    ) -> MonitoringResult:
        patterns = ObservedPatterns(
            price_changes=self._price_changes(subscriptions),
            unused_subscriptions=self._unused(subscriptions, now),
            upcoming_renewals=self._upcoming_renewals(subscriptions, now),
        )

        logger.info(
            "observation_complete",
            subscriptions=len(subscriptions),
            transactions=len(transactions),
            price_changes=len(patterns.price_changes),
            unused=len(patterns.unused_subscriptions),
            renewals=len(patterns.upcoming_renewals),
        )
        return MonitoringResult(
            subscriptions=subscriptions,
            transactions=transactions,
            patterns=patterns,
        )

    @staticmethod
    def _price_changes(subscriptions: list[Subscription]) -> list[PriceChange]:
        # Decreases are kept here; the anomaly rules decide what counts.
        changes: list[PriceChange] = []
        for sub in subscriptions:
            previous = sub.previous_amount
            if previous is None or previous == sub.current_amount:
                continue
            changes.append(
                PriceChange(
                    subscription=sub,
                    old_amount=previous,
                    new_amount=sub.current_amount,
                    percentage_change=round_half_up(
                        (sub.current_amount - previous) / previous * 100
                    ),
                )
            )
        return changes

    @staticmethod
    def _unused(subscriptions: list[Subscription], now: datetime) -> list[UnusedSubscription]:
        unused: list[UnusedSubscription] = []
        for sub in subscriptions:
            # No last-used date means usage is unknown, not "never used".
            if sub.status != SubscriptionStatus.active or sub.last_used_date is None:
                continue
            days = whole_days_between(sub.last_used_date, now)
            if days >= UNUSED_DAYS_THRESHOLD:
                unused.append(UnusedSubscription(subscription=sub, days_since_last_use=days))
        return unused

    @staticmethod
    def _upcoming_renewals(
        subscriptions: list[Subscription], now: datetime
    ) -> list[UpcomingRenewal]:
        renewals: list[UpcomingRenewal] = []
        for sub in subscriptions:
            if sub.status != SubscriptionStatus.active:
                continue
            days = whole_days_between(now, sub.next_billing_date)
            if 0 <= days <= RENEWAL_WINDOW_DAYS:
                renewals.append(UpcomingRenewal(subscription=sub, days_until_renewal=days))
        return renewals
