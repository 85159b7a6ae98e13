import aiosqlite
import structlog

from subguard.config import settings

logger = structlog.get_logger()

_db: aiosqlite.Connection | None = None

DDL_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS subscriptions (
        id TEXT PRIMARY KEY,
        merchant TEXT NOT NULL,
        merchant_logo TEXT,
        current_amount REAL NOT NULL,
        previous_amount REAL,
        billing_cycle TEXT NOT NULL,
        status TEXT NOT NULL,
        last_used_date TEXT,
        next_billing_date TEXT NOT NULL,
        category TEXT NOT NULL,
        auto_pay_enabled INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS transactions (
        id TEXT PRIMARY KEY,
        date TEXT NOT NULL,
        merchant TEXT NOT NULL,
        merchant_logo TEXT,
        amount REAL NOT NULL,
        transaction_type TEXT NOT NULL,
        status TEXT NOT NULL,
        subscription_id TEXT,
        category TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS alerts (
        id TEXT PRIMARY KEY,
        type TEXT NOT NULL,
        severity TEXT NOT NULL,
        subscription_id TEXT NOT NULL,
        merchant TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        financial_impact_monthly REAL NOT NULL,
        financial_impact_yearly REAL NOT NULL,
        recommendation TEXT NOT NULL,
        ai_explanation TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        created_at TEXT NOT NULL,
        old_amount REAL,
        new_amount REAL,
        UNIQUE(merchant, type)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS agent_statuses (
        name TEXT PRIMARY KEY,
        status TEXT NOT NULL,
        last_run TEXT NOT NULL,
        observations INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS audit_logs (
        id TEXT PRIMARY KEY,
        timestamp TEXT NOT NULL,
        action TEXT NOT NULL,
        entity_type TEXT NOT NULL,
        entity_id TEXT NOT NULL,
        details TEXT NOT NULL,
        user_approved INTEGER NOT NULL DEFAULT 0
    )
    """,
]


async def connect(path: str) -> aiosqlite.Connection:
    """Open a connection and make sure every table exists."""
    db = await aiosqlite.connect(path)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")

    for ddl in DDL_STATEMENTS:
        await db.execute(ddl)
    await db.commit()
    return db


async def init_database() -> None:
    global _db
    _db = await connect(settings.db_path)

    if settings.seed_demo_data:
        from subguard.seed import seed_database

        await seed_database(_db)

    logger.info("database_initialized", path=settings.db_path)


async def close_database() -> None:
    global _db
    if _db is not None:
        await _db.close()
        _db = None
        logger.info("database_closed")


def get_db() -> aiosqlite.Connection:
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db


async def check_health() -> None:
    db = get_db()
    cursor = await db.execute("SELECT 1")
    await cursor.close()
