import structlog

from subguard.audit.models import AuditAction, AuditEntityType
from subguard.exceptions import NotFoundError
from subguard.store import SubscriptionStore
from subguard.subscriptions.models import SubscriptionAction, SubscriptionStatus
from subguard.subscriptions.schemas import Subscription, SubscriptionUpdate

logger = structlog.get_logger()

_ACTION_UPDATES: dict[SubscriptionAction, tuple[SubscriptionStatus, bool, AuditAction]] = {
    SubscriptionAction.cancel: (
        SubscriptionStatus.cancelled,
        False,
        AuditAction.subscription_cancelled,
    ),
    SubscriptionAction.pause: (
        SubscriptionStatus.paused,
        False,
        AuditAction.subscription_paused,
    ),
    SubscriptionAction.resume: (
        SubscriptionStatus.active,
        True,
        AuditAction.subscription_resumed,
    ),
}


class SubscriptionService:
    def __init__(self, store: SubscriptionStore) -> None:
        self._store = store

    async def list_all(self) -> list[Subscription]:
        return await self._store.get_subscriptions()

    async def get(self, subscription_id: str) -> Subscription:
        subscription = await self._store.get_subscription(subscription_id)
        if subscription is None:
            raise NotFoundError("Subscription", subscription_id)
        return subscription

    async def apply_action(
        self, subscription_id: str, action: SubscriptionAction
    ) -> Subscription:
        """Apply a user-approved lifecycle action. Cancel and pause also stop auto-pay."""
        status, auto_pay, audit_action = _ACTION_UPDATES[action]
        subscription = await self._store.update_subscription(
            subscription_id,
            SubscriptionUpdate(status=status, auto_pay_enabled=auto_pay),
        )
        if subscription is None:
            raise NotFoundError("Subscription", subscription_id)

        await self._store.record_audit(
            audit_action,
            AuditEntityType.subscription,
            subscription.id,
            f"User action: {action} on {subscription.merchant}",
            user_approved=True,
        )
        logger.info(
            "subscription_action_applied",
            subscription_id=subscription.id,
            merchant=subscription.merchant,
            action=action,
        )
        return subscription
