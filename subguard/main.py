from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from subguard.agents.models import AgentName
from subguard.agents.router import router as agents_router
from subguard.alerts.router import router as alerts_router
from subguard.audit.router import router as audit_router
from subguard.config import settings
from subguard.dashboard.router import router as dashboard_router
from subguard.database import close_database, get_db, init_database
from subguard.exception_handlers import register_exception_handlers
from subguard.logging_config import setup_logging
from subguard.pipeline.router import router as simulate_router
from subguard.store import SQLiteStore
from subguard.subscriptions.router import router as subscriptions_router
from subguard.transactions.router import router as transactions_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_database()
    await SQLiteStore(get_db()).ensure_agent_statuses(list(AgentName))
    yield
    await close_database()


app = FastAPI(
    title="SubGuard",
    description="Subscription monitoring with a multi-agent anomaly pipeline",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(subscriptions_router, prefix="/api/v1/subscriptions", tags=["subscriptions"])
app.include_router(transactions_router, prefix="/api/v1/transactions", tags=["transactions"])
app.include_router(alerts_router, prefix="/api/v1/alerts", tags=["alerts"])
app.include_router(agents_router, prefix="/api/v1/agents", tags=["agents"])
app.include_router(simulate_router, prefix="/api/v1/simulate", tags=["simulate"])
app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["dashboard"])
app.include_router(audit_router, prefix="/api/v1/audit", tags=["audit"])


@app.get("/api/v1/health")
async def health():
    from subguard.database import check_health

    await check_health()
    return {"status": "healthy"}
