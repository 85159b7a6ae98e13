"""Tests for the demo seed."""

from subguard.agents.models import AgentName, AgentState
from subguard.pipeline.context import PipelineContext
from subguard.pipeline.orchestrator import run_pipeline
from subguard.seed import seed_database
from subguard.store import SQLiteStore
from subguard.subscriptions.models import SubscriptionStatus


async def test_seed_populates_empty_database(db):
    await seed_database(db)

    store = SQLiteStore(db)
    subscriptions = await store.get_subscriptions()
    assert len(subscriptions) == 10
    assert len(await store.get_transactions()) == 5

    by_merchant = {sub.merchant: sub for sub in subscriptions}
    assert by_merchant["Netflix"].previous_amount == 499
    assert by_merchant["LinkedIn"].status == SubscriptionStatus.paused
    assert by_merchant["LinkedIn"].auto_pay_enabled is False

    statuses = await store.get_agent_statuses()
    assert [s.name for s in statuses] == list(AgentName)
    assert {s.status for s in statuses} == {AgentState.idle}


async def test_seed_skips_populated_database(db, add_subscription):
    await add_subscription(merchant="Existing")

    await seed_database(db)

    assert [s.merchant for s in await SQLiteStore(db).get_subscriptions()] == ["Existing"]


async def test_seeded_data_trips_the_pipeline(db):
    await seed_database(db)

    result = await run_pipeline(PipelineContext(store=SQLiteStore(db)))

    assert result.success is True
    assert result.new_alerts > 0
