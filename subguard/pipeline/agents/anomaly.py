"""Anomaly stage: threshold rules over the observed patterns.

Four independent rule sets; one subscription may trip several of them.
"""

import structlog

from subguard.alerts.models import AnomalyType, Severity
from subguard.pipeline.schemas import (
    Anomaly,
    DuplicateMember,
    DuplicateServiceData,
    MonitoringResult,
    PriceIncreaseData,
    UnusedSubscriptionData,
    UpcomingRenewalData,
)
from subguard.subscriptions.models import BillingCycle, SubscriptionStatus
from subguard.subscriptions.schemas import Subscription

logger = structlog.get_logger()

PRICE_INCREASE_THRESHOLD_PCT = 15
PRICE_INCREASE_HIGH_PCT = 25
UNUSED_HIGH_DAYS = 90
UNUSED_MEDIUM_DAYS = 60
RENEWAL_HIGH_DAYS = 3
DUPLICATE_MIN_MEMBERS = 2


class AnomalyDetectionAgent:
    name = "Anomaly Detection Agent"

    def detect(self, monitoring: MonitoringResult) -> list[Anomaly]:
        anomalies = [
            *self._price_increases(monitoring),
            *self._unused_subscriptions(monitoring),
            *self._upcoming_renewals(monitoring),
            *self._duplicate_services(monitoring.subscriptions),
        ]
        for anomaly in anomalies:
            logger.info(
                "anomaly_detected",
                type=anomaly.type,
                merchant=anomaly.merchant,
                severity=anomaly.severity,
            )
        logger.info("anomaly_detection_complete", total=len(anomalies))
        return anomalies

    @staticmethod
    def _price_increases(monitoring: MonitoringResult) -> list[Anomaly]:
        anomalies: list[Anomaly] = []
        for change in monitoring.patterns.price_changes:
            if change.percentage_change < PRICE_INCREASE_THRESHOLD_PCT:
                continue
            sub = change.subscription
            anomalies.append(
                Anomaly(
                    type=AnomalyType.price_increase,
                    subscription_id=sub.id,
                    merchant=sub.merchant,
                    severity=(
                        Severity.high
                        if change.percentage_change >= PRICE_INCREASE_HIGH_PCT
                        else Severity.medium
                    ),
                    data=PriceIncreaseData(
                        old_amount=change.old_amount,
                        new_amount=change.new_amount,
                        percentage_change=change.percentage_change,
                        billing_cycle=sub.billing_cycle,
                    ),
                )
            )
        return anomalies

    @staticmethod
    def _unused_subscriptions(monitoring: MonitoringResult) -> list[Anomaly]:
        anomalies: list[Anomaly] = []
        for unused in monitoring.patterns.unused_subscriptions:
            days = unused.days_since_last_use
            if days >= UNUSED_HIGH_DAYS:
                severity = Severity.high
            elif days >= UNUSED_MEDIUM_DAYS:
                severity = Severity.medium
            else:
                severity = Severity.low

            sub = unused.subscription
            anomalies.append(
                Anomaly(
                    type=AnomalyType.unused_subscription,
                    subscription_id=sub.id,
                    merchant=sub.merchant,
                    severity=severity,
                    data=UnusedSubscriptionData(
                        days_since_last_use=days,
                        amount=sub.current_amount,
                        billing_cycle=sub.billing_cycle,
                    ),
                )
            )
        return anomalies

    @staticmethod
    def _upcoming_renewals(monitoring: MonitoringResult) -> list[Anomaly]:
        # Only annual lump-sum charges are worth a pre-renewal alert.
        anomalies: list[Anomaly] = []
        for renewal in monitoring.patterns.upcoming_renewals:
            sub = renewal.subscription
            if sub.billing_cycle != BillingCycle.yearly:
                continue
            anomalies.append(
                Anomaly(
                    type=AnomalyType.upcoming_renewal,
                    subscription_id=sub.id,
                    merchant=sub.merchant,
                    severity=(
                        Severity.high
                        if renewal.days_until_renewal <= RENEWAL_HIGH_DAYS
                        else Severity.medium
                    ),
                    data=UpcomingRenewalData(
                        days_until_renewal=renewal.days_until_renewal,
                        amount=sub.current_amount,
                    ),
                )
            )
        return anomalies

    @staticmethod
    def _duplicate_services(subscriptions: list[Subscription]) -> list[Anomaly]:
        by_category: dict[str, list[Subscription]] = {}
        for sub in subscriptions:
            if sub.status == SubscriptionStatus.active:
                by_category.setdefault(sub.category, []).append(sub)

        anomalies: list[Anomaly] = []
        for category, members in by_category.items():
            if len(members) < DUPLICATE_MIN_MEMBERS:
                continue
            # Amounts are summed as-is, yearly plans included.
            anomalies.append(
                Anomaly(
                    type=AnomalyType.duplicate_service,
                    subscription_id=members[0].id,
                    merchant=", ".join(sub.merchant for sub in members),
                    severity=Severity.low,
                    data=DuplicateServiceData(
                        category=category,
                        subscriptions=tuple(
                            DuplicateMember(
                                id=sub.id,
                                merchant=sub.merchant,
                                amount=sub.current_amount,
                            )
                            for sub in members
                        ),
                        total_monthly_cost=sum(sub.current_amount for sub in members),
                    ),
                )
            )
        return anomalies
