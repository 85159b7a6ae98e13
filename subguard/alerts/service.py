import structlog

from subguard.alerts.models import AlertStatus, ResolveAction
from subguard.alerts.schemas import Alert, AlertUpdate, DismissAlertResponse, ResolveAlertResponse
from subguard.audit.models import AuditAction, AuditEntityType
from subguard.exceptions import ConflictError, NotFoundError
from subguard.store import SubscriptionStore
from subguard.subscriptions.models import SubscriptionStatus
from subguard.subscriptions.schemas import SubscriptionUpdate

logger = structlog.get_logger()


class AlertService:
    """User decisions on pipeline alerts. Nothing here runs without an explicit request."""

    def __init__(self, store: SubscriptionStore) -> None:
        self._store = store

    async def list_all(self, status: AlertStatus | None = None) -> list[Alert]:
        return await self._store.get_alerts(status)

    async def resolve(self, alert_id: str, action: ResolveAction) -> ResolveAlertResponse:
        alert = await self._get_pending(alert_id)

        await self._store.update_alert(alert_id, AlertUpdate(status=AlertStatus.resolved))
        await self._store.record_audit(
            AuditAction.alert_resolved,
            AuditEntityType.alert,
            alert.id,
            f"Alert for {alert.merchant} ({alert.type}) resolved with action: {action}",
            user_approved=True,
        )

        if action == ResolveAction.cancel:
            subscription = await self._store.update_subscription(
                alert.subscription_id,
                SubscriptionUpdate(status=SubscriptionStatus.cancelled, auto_pay_enabled=False),
            )
            if subscription is None:
                logger.warning(
                    "alert_subscription_missing",
                    alert_id=alert.id,
                    subscription_id=alert.subscription_id,
                )
            else:
                await self._store.record_audit(
                    AuditAction.subscription_cancelled,
                    AuditEntityType.subscription,
                    subscription.id,
                    f"Subscription cancelled: {subscription.merchant}, "
                    f"yearly savings {alert.financial_impact.yearly:g}",
                    user_approved=True,
                )

        logger.info(
            "alert_resolved",
            alert_id=alert.id,
            merchant=alert.merchant,
            type=alert.type,
            action=action,
        )
        return ResolveAlertResponse(success=True, action=action, merchant=alert.merchant)

    async def dismiss(self, alert_id: str) -> DismissAlertResponse:
        alert = await self._get_pending(alert_id)

        await self._store.update_alert(alert_id, AlertUpdate(status=AlertStatus.dismissed))
        await self._store.record_audit(
            AuditAction.alert_dismissed,
            AuditEntityType.alert,
            alert.id,
            f"Alert dismissed: {alert.title}",
            user_approved=True,
        )
        logger.info("alert_dismissed", alert_id=alert.id, merchant=alert.merchant)
        return DismissAlertResponse(success=True)

    async def _get_pending(self, alert_id: str) -> Alert:
        alert = await self._store.get_alert(alert_id)
        if alert is None:
            raise NotFoundError("Alert", alert_id)
        if alert.status != AlertStatus.pending:
            raise ConflictError(f"Alert '{alert_id}' is already {alert.status}")
        return alert
