import calendar
from collections import defaultdict
from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from subguard.alerts.models import AlertStatus, Severity
from subguard.dashboard.schemas import DashboardSummary, MonthlyTrendPoint
from subguard.pipeline.calc import round_half_up
from subguard.store import SubscriptionStore
from subguard.subscriptions.models import BillingCycle, SubscriptionStatus
from subguard.transactions.models import TransactionStatus

logger = structlog.get_logger()


class DashboardService:
    def __init__(
        self,
        store: SubscriptionStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def summary(self) -> DashboardSummary:
        subscriptions = await self._store.get_subscriptions()
        alerts = await self._store.get_alerts()

        active = [sub for sub in subscriptions if sub.status == SubscriptionStatus.active]
        monthly_spend = sum(
            (
                sub.current_amount
                if sub.billing_cycle == BillingCycle.monthly
                else sub.current_amount / 12
            )
            for sub in active
        )

        pending = [alert for alert in alerts if alert.status == AlertStatus.pending]
        potential_savings = sum(alert.financial_impact.yearly for alert in pending)

        severities = {alert.severity for alert in pending}
        if Severity.high in severities:
            risk_score = Severity.high
        elif Severity.medium in severities:
            risk_score = Severity.medium
        else:
            risk_score = Severity.low

        summary = DashboardSummary(
            total_subscriptions=len(subscriptions),
            active_subscriptions=len(active),
            monthly_spend=round_half_up(monthly_spend),
            yearly_projected_spend=round_half_up(monthly_spend * 12),
            potential_savings=round_half_up(potential_savings),
            pending_alerts=len(pending),
            risk_score=risk_score,
        )
        logger.debug("dashboard_summary", **summary.model_dump())
        return summary

    async def monthly_trend(self, months: int = 6) -> list[MonthlyTrendPoint]:
        """Successful spend per calendar month, oldest first, ending with the current month.

        Months without a successful transaction report 0.
        """
        totals: dict[tuple[int, int], float] = defaultdict(float)
        for txn in await self._store.get_transactions():
            if txn.status == TransactionStatus.success:
                totals[(txn.date.year, txn.date.month)] += txn.amount

        now = self._clock()
        points = []
        for offset in range(months - 1, -1, -1):
            year, month_index = divmod(now.year * 12 + now.month - 1 - offset, 12)
            points.append(
                MonthlyTrendPoint(
                    month=calendar.month_abbr[month_index + 1],
                    amount=round_half_up(totals[(year, month_index + 1)]),
                )
            )
        return points
