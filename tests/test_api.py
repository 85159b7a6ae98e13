"""HTTP surface tests over ASGITransport; lifespan is not run, the test database is patched in."""

from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient

from subguard import database
from subguard.dashboard.service import DashboardService
from subguard.dependencies import get_dashboard_service, get_pipeline_service
from subguard.main import app
from subguard.pipeline.explainers import TemplateExplanationProvider
from subguard.pipeline.service import PipelineService
from subguard.store import SQLiteStore
from subguard.transactions.models import TransactionType
from subguard.transactions.schemas import TransactionCreate
from tests.helpers import NOW, ScriptedRandom


@pytest.fixture
async def client(db, store, monkeypatch):
    monkeypatch.setattr(database, "_db", db)
    app.dependency_overrides[get_pipeline_service] = lambda: PipelineService(
        SQLiteStore(db), TemplateExplanationProvider(), clock=lambda: NOW
    )
    app.dependency_overrides[get_dashboard_service] = lambda: DashboardService(
        SQLiteStore(db), clock=lambda: NOW
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def test_health(client):
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_list_subscriptions_uses_camel_case(client, add_subscription):
    await add_subscription(merchant="Netflix", current_amount=649, previous_amount=499)

    response = await client.get("/api/v1/subscriptions/")

    assert response.status_code == 200
    (body,) = response.json()
    assert body["merchant"] == "Netflix"
    assert body["currentAmount"] == 649
    assert body["previousAmount"] == 499
    assert body["autoPayEnabled"] is True


async def test_missing_subscription_is_404(client):
    response = await client.get("/api/v1/subscriptions/nope")

    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


@pytest.mark.parametrize(
    ("action", "status", "auto_pay"),
    [("cancel", "cancelled", False), ("pause", "paused", False), ("resume", "active", True)],
)
async def test_subscription_actions(client, add_subscription, action, status, auto_pay):
    sub = await add_subscription(merchant="Dropbox")

    response = await client.patch(f"/api/v1/subscriptions/{sub.id}", json={"action": action})

    assert response.status_code == 200
    assert response.json()["status"] == status
    assert response.json()["autoPayEnabled"] is auto_pay

    audit = (await client.get("/api/v1/audit/")).json()
    assert audit[0]["entityId"] == sub.id
    assert audit[0]["userApproved"] is True


async def test_unknown_subscription_action_is_rejected(client, add_subscription):
    sub = await add_subscription()

    response = await client.patch(f"/api/v1/subscriptions/{sub.id}", json={"action": "delete"})

    assert response.status_code == 422


async def test_run_then_resolve_with_cancel(client, portfolio):
    run = await client.post("/api/v1/agents/run")

    assert run.status_code == 200
    body = run.json()
    assert body["success"] is True
    assert body["newAlerts"] == 4
    assert body["totalPotentialSavings"] == 70067
    assert body["recommendations"][0]["requiresUserApproval"] is True
    assert body["executionLog"][0].startswith("[Step 1/5]")

    alerts = (await client.get("/api/v1/alerts/", params={"status": "pending"})).json()
    netflix = next(a for a in alerts if a["merchant"] == "Netflix")
    assert netflix["type"] == "price_increase"
    assert netflix["financialImpact"] == {"monthly": 150, "yearly": 1800}

    resolved = await client.post(
        f"/api/v1/alerts/{netflix['id']}/resolve", json={"action": "cancel"}
    )

    assert resolved.status_code == 200
    assert resolved.json() == {"success": True, "action": "cancel", "merchant": "Netflix"}
    sub = (await client.get(f"/api/v1/subscriptions/{portfolio['Netflix'].id}")).json()
    assert sub["status"] == "cancelled"
    assert sub["autoPayEnabled"] is False

    again = await client.post(f"/api/v1/alerts/{netflix['id']}/resolve", json={"action": "keep"})
    assert again.status_code == 409


async def test_resolve_with_keep_leaves_subscription(client, portfolio):
    await client.post("/api/v1/agents/run")
    alerts = (await client.get("/api/v1/alerts/")).json()
    adobe = next(a for a in alerts if a["merchant"] == "Adobe Creative")

    response = await client.post(f"/api/v1/alerts/{adobe['id']}/resolve", json={"action": "keep"})

    assert response.status_code == 200
    sub = (await client.get(f"/api/v1/subscriptions/{portfolio['Adobe Creative'].id}")).json()
    assert sub["status"] == "active"


async def test_dismiss_alert(client, portfolio):
    await client.post("/api/v1/agents/run")
    alerts = (await client.get("/api/v1/alerts/")).json()

    response = await client.post(f"/api/v1/alerts/{alerts[0]['id']}/dismiss")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    dismissed = (await client.get("/api/v1/alerts/", params={"status": "dismissed"})).json()
    assert [a["id"] for a in dismissed] == [alerts[0]["id"]]


async def test_dismiss_missing_alert_is_404(client):
    response = await client.post("/api/v1/alerts/nope/dismiss")

    assert response.status_code == 404


async def test_agent_statuses(client):
    response = await client.get("/api/v1/agents/status")

    assert response.status_code == 200
    assert [s["name"] for s in response.json()] == [
        "Monitoring Agent",
        "Anomaly Detection Agent",
        "Risk Prediction Agent",
        "Reasoning Agent",
        "Action Recommendation Agent",
    ]


async def test_dashboard_summary(client, add_subscription):
    await add_subscription(merchant="Netflix", current_amount=649, category="Video")
    await add_subscription(
        merchant="Amazon Prime", current_amount=1499, billing_cycle="yearly", category="Shopping"
    )
    await add_subscription(merchant="LinkedIn", current_amount=2499, status="paused")

    before = (await client.get("/api/v1/dashboard/summary")).json()

    assert before == {
        "totalSubscriptions": 3,
        "activeSubscriptions": 2,
        "monthlySpend": 774,
        "yearlyProjectedSpend": 9287,
        "potentialSavings": 0,
        "pendingAlerts": 0,
        "riskScore": "low",
    }


async def test_dashboard_reflects_pending_alerts(client, portfolio):
    await client.post("/api/v1/agents/run")

    summary = (await client.get("/api/v1/dashboard/summary")).json()

    assert summary["pendingAlerts"] == 4
    assert summary["potentialSavings"] == 70067
    assert summary["riskScore"] == "high"


async def test_dashboard_monthly_trend(client, store):
    """Only successful spend counts; empty months are 0 and last year's March stays out."""
    for date, amount, status in [
        (datetime(2025, 3, 2, tzinfo=UTC), 649.4, "success"),
        (datetime(2025, 3, 10, tzinfo=UTC), 100.2, "success"),
        (datetime(2025, 2, 5, tzinfo=UTC), 649, "blocked"),
        (datetime(2025, 1, 20, tzinfo=UTC), 499, "success"),
        (datetime(2024, 9, 30, tzinfo=UTC), 1000, "success"),
        (datetime(2024, 3, 10, tzinfo=UTC), 300, "success"),
    ]:
        await store.create_transaction(
            TransactionCreate(
                date=date,
                merchant="Netflix",
                amount=amount,
                transaction_type=TransactionType.AUTO_PAY,
                status=status,
                category="Video",
            )
        )

    response = await client.get("/api/v1/dashboard/monthly-trend")

    assert response.status_code == 200
    assert response.json() == [
        {"month": "Oct", "amount": 0},
        {"month": "Nov", "amount": 0},
        {"month": "Dec", "amount": 0},
        {"month": "Jan", "amount": 499},
        {"month": "Feb", "amount": 0},
        {"month": "Mar", "amount": 750},
    ]


async def test_simulate_without_candidates_is_422(client):
    response = await client.post("/api/v1/simulate/autopay")

    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_simulate_autopay(client, db, add_subscription):
    await add_subscription(merchant="Netflix", current_amount=649)
    app.dependency_overrides[get_pipeline_service] = lambda: PipelineService(
        SQLiteStore(db), TemplateExplanationProvider(), ScriptedRandom(0.1, 20), lambda: NOW
    )

    response = await client.post("/api/v1/simulate/autopay")

    assert response.status_code == 200
    body = response.json()
    assert body["transaction"]["priceIncreased"] is True
    assert body["transaction"]["percentageIncrease"] == 20
    assert body["transaction"]["amount"] == 779
    assert body["newAlerts"] == 1
    assert body["message"].startswith("Netflix price increased by 20%")

    transactions = (await client.get("/api/v1/transactions/")).json()
    assert transactions[0]["transactionType"] == "AUTO_PAY"
