from uuid import uuid4

import aiosqlite

from subguard.alerts.schemas import Alert, AlertCreate, AlertUpdate

_COLUMNS = (
    "id, type, severity, subscription_id, merchant, title, description, "
    "financial_impact_monthly, financial_impact_yearly, recommendation, ai_explanation, "
    "status, created_at, old_amount, new_amount"
)


def _to_model(row: aiosqlite.Row) -> Alert:
    data = dict(row)
    data["financial_impact"] = {
        "monthly": data.pop("financial_impact_monthly"),
        "yearly": data.pop("financial_impact_yearly"),
    }
    return Alert.model_validate(data)


class AlertRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, alert_id: str) -> Alert | None:
        cursor = await self._db.execute(
            f"SELECT {_COLUMNS} FROM alerts WHERE id = ?",
            (alert_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return _to_model(row)

    async def list_all(self, status: str | None = None) -> list[Alert]:
        if status is not None:
            cursor = await self._db.execute(
                f"SELECT {_COLUMNS} FROM alerts WHERE status = ? ORDER BY created_at DESC",
                (status,),
            )
        else:
            cursor = await self._db.execute(
                f"SELECT {_COLUMNS} FROM alerts ORDER BY created_at DESC"
            )
        rows = await cursor.fetchall()
        return [_to_model(row) for row in rows]

    async def create_if_absent(self, data: AlertCreate) -> Alert | None:
        """Insert unless an alert with the same (merchant, type) exists, whatever its status.

        Returns None when the row was ignored by the UNIQUE(merchant, type) constraint.
        """
        alert = Alert(id=str(uuid4()), **data.model_dump())
        cursor = await self._db.execute(
            f"""
            INSERT OR IGNORE INTO alerts ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                alert.id,
                alert.type,
                alert.severity,
                alert.subscription_id,
                alert.merchant,
                alert.title,
                alert.description,
                alert.financial_impact.monthly,
                alert.financial_impact.yearly,
                alert.recommendation,
                alert.ai_explanation,
                alert.status,
                alert.created_at.isoformat(),
                alert.old_amount,
                alert.new_amount,
            ),
        )
        if cursor.rowcount == 0:
            return None
        return alert

    async def update(self, alert_id: str, data: AlertUpdate) -> Alert | None:
        if data.status is None:
            return await self.get_by_id(alert_id)

        cursor = await self._db.execute(
            "UPDATE alerts SET status = ? WHERE id = ?",
            (data.status, alert_id),
        )
        if cursor.rowcount == 0:
            return None
        return await self.get_by_id(alert_id)
