"""Persistent-store collaborator consumed by the pipeline and the approval endpoints.

``SubscriptionStore`` is the narrow contract; ``SQLiteStore`` implements it on
top of the per-domain repositories and owns commits, the way a service owns the
unit of work around several repository calls.
"""

from datetime import UTC, datetime
from typing import Protocol

import aiosqlite
import structlog

from subguard.agents.models import AgentState
from subguard.agents.repository import AgentStatusRepository
from subguard.agents.schemas import AgentStatus, AgentStatusUpdate
from subguard.alerts.models import AlertStatus
from subguard.alerts.repository import AlertRepository
from subguard.alerts.schemas import Alert, AlertCreate, AlertUpdate
from subguard.audit.models import AuditAction, AuditEntityType
from subguard.audit.repository import AuditLogRepository
from subguard.audit.schemas import AuditLog
from subguard.subscriptions.repository import SubscriptionRepository
from subguard.subscriptions.schemas import Subscription, SubscriptionUpdate
from subguard.transactions.repository import TransactionRepository
from subguard.transactions.schemas import Transaction, TransactionCreate

logger = structlog.get_logger()


class SubscriptionStore(Protocol):
    async def get_subscriptions(self) -> list[Subscription]: ...

    async def get_subscription(self, subscription_id: str) -> Subscription | None: ...

    async def update_subscription(
        self, subscription_id: str, data: SubscriptionUpdate
    ) -> Subscription | None: ...

    async def get_transactions(self) -> list[Transaction]: ...

    async def create_transaction(self, data: TransactionCreate) -> Transaction: ...

    async def get_alerts(self, status: AlertStatus | None = None) -> list[Alert]: ...

    async def get_alert(self, alert_id: str) -> Alert | None: ...

    async def create_alert(self, data: AlertCreate) -> Alert | None: ...

    async def update_alert(self, alert_id: str, data: AlertUpdate) -> Alert | None: ...

    async def get_agent_statuses(self) -> list[AgentStatus]: ...

    async def update_agent_status(
        self, name: str, data: AgentStatusUpdate
    ) -> AgentStatus | None: ...

    async def record_audit(
        self,
        action: AuditAction,
        entity_type: AuditEntityType,
        entity_id: str,
        details: str,
        user_approved: bool,
    ) -> AuditLog: ...


class SQLiteStore:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db
        self._subscriptions = SubscriptionRepository(db)
        self._transactions = TransactionRepository(db)
        self._alerts = AlertRepository(db)
        self._agents = AgentStatusRepository(db)
        self._audit = AuditLogRepository(db)

    async def get_subscriptions(self) -> list[Subscription]:
        return await self._subscriptions.list_all()

    async def get_subscription(self, subscription_id: str) -> Subscription | None:
        return await self._subscriptions.get_by_id(subscription_id)

    async def update_subscription(
        self, subscription_id: str, data: SubscriptionUpdate
    ) -> Subscription | None:
        subscription = await self._subscriptions.update(subscription_id, data)
        await self._db.commit()
        return subscription

    async def get_transactions(self) -> list[Transaction]:
        return await self._transactions.list_all()

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        transaction = await self._transactions.create(data)
        await self._db.commit()
        logger.info(
            "transaction_created",
            transaction_id=transaction.id,
            merchant=transaction.merchant,
            amount=transaction.amount,
        )
        return transaction

    async def get_alerts(self, status: AlertStatus | None = None) -> list[Alert]:
        return await self._alerts.list_all(status)

    async def get_alert(self, alert_id: str) -> Alert | None:
        return await self._alerts.get_by_id(alert_id)

    async def create_alert(self, data: AlertCreate) -> Alert | None:
        """Persist a new alert; None if one already exists for the same merchant and type."""
        alert = await self._alerts.create_if_absent(data)
        if alert is None:
            logger.info("alert_deduplicated", merchant=data.merchant, type=data.type)
            return None

        await self._audit.append(
            AuditAction.alert_created,
            AuditEntityType.alert,
            alert.id,
            f"Created alert: {alert.title} for {alert.merchant}",
            user_approved=False,
        )
        await self._db.commit()
        logger.info("alert_created", alert_id=alert.id, merchant=alert.merchant, type=alert.type)
        return alert

    async def update_alert(self, alert_id: str, data: AlertUpdate) -> Alert | None:
        alert = await self._alerts.update(alert_id, data)
        await self._db.commit()
        return alert

    async def get_agent_statuses(self) -> list[AgentStatus]:
        return await self._agents.list_all()

    async def update_agent_status(self, name: str, data: AgentStatusUpdate) -> AgentStatus | None:
        status = await self._agents.update(name, data)
        await self._db.commit()
        return status

    async def ensure_agent_statuses(self, names: list[str]) -> None:
        """Create idle status rows for agents that have never reported."""
        known = {status.name for status in await self._agents.list_all()}
        for name in names:
            if name not in known:
                await self._agents.upsert(
                    AgentStatus(name=name, status=AgentState.idle, last_run=datetime.now(UTC))
                )
        await self._db.commit()

    async def record_audit(
        self,
        action: AuditAction,
        entity_type: AuditEntityType,
        entity_id: str,
        details: str,
        user_approved: bool,
    ) -> AuditLog:
        entry = await self._audit.append(action, entity_type, entity_id, details, user_approved)
        await self._db.commit()
        return entry

    async def get_audit_logs(self, limit: int = 50) -> list[AuditLog]:
        return await self._audit.list_recent(limit)
