"""Demo data applied to an empty database on first start."""

from datetime import UTC, datetime, timedelta

import aiosqlite
import structlog

from subguard.agents.models import AgentName, AgentState
from subguard.agents.repository import AgentStatusRepository
from subguard.agents.schemas import AgentStatus
from subguard.subscriptions.models import BillingCycle, SubscriptionStatus
from subguard.subscriptions.repository import SubscriptionRepository
from subguard.subscriptions.schemas import SubscriptionCreate
from subguard.transactions.models import TransactionStatus, TransactionType
from subguard.transactions.repository import TransactionRepository
from subguard.transactions.schemas import TransactionCreate

logger = structlog.get_logger()

_MONTHLY = BillingCycle.monthly
_YEARLY = BillingCycle.yearly
_ACTIVE = SubscriptionStatus.active
_PAUSED = SubscriptionStatus.paused

# (merchant, amount, previous, cycle, status, days since use, days to billing, category)
DEMO_SUBSCRIPTIONS = [
    ("Netflix", 649, 499, _MONTHLY, _ACTIVE, 2, 15, "Entertainment"),
    ("Spotify", 119, None, _MONTHLY, _ACTIVE, 0, 22, "Entertainment"),
    ("Amazon Prime", 1499, None, _YEARLY, _ACTIVE, 5, 5, "Shopping"),
    ("YouTube Premium", 129, None, _MONTHLY, _ACTIVE, 45, 8, "Entertainment"),
    ("Adobe Creative", 4999, 3999, _MONTHLY, _ACTIVE, 90, 5, "Productivity"),
    ("Dropbox", 999, None, _MONTHLY, _ACTIVE, 60, 12, "Storage"),
    ("LinkedIn", 2499, None, _MONTHLY, _PAUSED, 120, 30, "Professional"),
    ("Notion", 800, None, _MONTHLY, _ACTIVE, 0, 18, "Productivity"),
    ("Fitness First", 2999, None, _MONTHLY, _ACTIVE, 35, 10, "Fitness"),
    ("Google One", 130, None, _MONTHLY, _ACTIVE, 10, 20, "Storage"),
]

# (merchant, amount, days ago)
DEMO_TRANSACTIONS = [
    ("Netflix", 649, 1),
    ("Spotify", 119, 3),
    ("Amazon Prime", 1499, 5),
    ("Adobe Creative", 4999, 7),
    ("Fitness First", 2999, 10),
]


async def seed_database(db: aiosqlite.Connection) -> None:
    subscriptions = SubscriptionRepository(db)
    if await subscriptions.count() > 0:
        logger.info("seed_skipped", reason="subscriptions already present")
        return

    now = datetime.now(UTC)
    created = {}
    for merchant, amount, previous, cycle, status, idle_days, due_days, category in (
        DEMO_SUBSCRIPTIONS
    ):
        sub = await subscriptions.create(
            SubscriptionCreate(
                merchant=merchant,
                current_amount=amount,
                previous_amount=previous,
                billing_cycle=cycle,
                status=status,
                last_used_date=now - timedelta(days=idle_days),
                next_billing_date=now + timedelta(days=due_days),
                category=category,
                auto_pay_enabled=status == SubscriptionStatus.active,
            )
        )
        created[merchant] = sub

    transactions = TransactionRepository(db)
    for merchant, amount, days_ago in DEMO_TRANSACTIONS:
        sub = created[merchant]
        await transactions.create(
            TransactionCreate(
                date=now - timedelta(days=days_ago),
                merchant=merchant,
                amount=amount,
                transaction_type=TransactionType.AUTO_PAY,
                status=TransactionStatus.success,
                subscription_id=sub.id,
                category=sub.category,
            )
        )

    agents = AgentStatusRepository(db)
    for name in AgentName:
        await agents.upsert(AgentStatus(name=name, status=AgentState.idle, last_run=now))

    await db.commit()
    logger.info(
        "database_seeded",
        subscriptions=len(DEMO_SUBSCRIPTIONS),
        transactions=len(DEMO_TRANSACTIONS),
        agents=len(AgentName),
    )
