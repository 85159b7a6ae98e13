"""Shared fixtures: in-memory database, a pinned clock and subscription factories."""

from datetime import timedelta
from uuid import uuid4

import pytest

from subguard import database
from subguard.agents.models import AgentName
from subguard.store import SQLiteStore
from subguard.subscriptions.repository import SubscriptionRepository
from subguard.subscriptions.schemas import Subscription, SubscriptionCreate
from tests.helpers import NOW


def subscription_data(**overrides) -> dict:
    data = {
        "merchant": "Spotify",
        "current_amount": 119,
        "billing_cycle": "monthly",
        "status": "active",
        "last_used_date": NOW - timedelta(days=1),
        "next_billing_date": NOW + timedelta(days=20),
        "category": "Music",
    }
    data.update(overrides)
    return data


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_subscription():
    """Build an in-memory Subscription, for stages that never touch the store."""

    def _make(**overrides) -> Subscription:
        return Subscription(id=str(uuid4()), **subscription_data(**overrides))

    return _make


@pytest.fixture
async def db():
    conn = await database.connect(":memory:")
    yield conn
    await conn.close()


@pytest.fixture
async def store(db) -> SQLiteStore:
    store = SQLiteStore(db)
    await store.ensure_agent_statuses(list(AgentName))
    return store


@pytest.fixture
def add_subscription(db):
    """Insert a subscription and commit."""

    async def _add(**overrides) -> Subscription:
        sub = await SubscriptionRepository(db).create(
            SubscriptionCreate(**subscription_data(**overrides))
        )
        await db.commit()
        return sub

    return _add


@pytest.fixture
async def portfolio(add_subscription) -> dict[str, Subscription]:
    """A mix that trips every detection rule exactly once."""
    subs = [
        await add_subscription(
            merchant="Netflix",
            current_amount=649,
            previous_amount=499,
            category="Entertainment",
        ),
        await add_subscription(
            merchant="Adobe Creative",
            current_amount=4999,
            last_used_date=NOW - timedelta(days=90),
            category="Productivity",
        ),
        await add_subscription(
            merchant="Amazon Prime",
            current_amount=1499,
            billing_cycle="yearly",
            next_billing_date=NOW + timedelta(days=2),
            category="Shopping",
        ),
        await add_subscription(merchant="Dropbox", current_amount=999, category="Storage"),
        await add_subscription(merchant="Google One", current_amount=130, category="Storage"),
    ]
    return {sub.merchant: sub for sub in subs}
