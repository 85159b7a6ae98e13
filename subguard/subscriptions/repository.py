from uuid import uuid4

import aiosqlite

from subguard.subscriptions.schemas import Subscription, SubscriptionCreate, SubscriptionUpdate

_COLUMNS = (
    "id, merchant, merchant_logo, current_amount, previous_amount, billing_cycle, status, "
    "last_used_date, next_billing_date, category, auto_pay_enabled"
)


def _to_model(row: aiosqlite.Row) -> Subscription:
    data = dict(row)
    data["auto_pay_enabled"] = bool(data["auto_pay_enabled"])
    return Subscription.model_validate(data)


class SubscriptionRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, subscription_id: str) -> Subscription | None:
        cursor = await self._db.execute(
            f"SELECT {_COLUMNS} FROM subscriptions WHERE id = ?",
            (subscription_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return _to_model(row)

    async def list_all(self) -> list[Subscription]:
        cursor = await self._db.execute(f"SELECT {_COLUMNS} FROM subscriptions ORDER BY rowid")
        rows = await cursor.fetchall()
        return [_to_model(row) for row in rows]

    async def count(self) -> int:
        cursor = await self._db.execute("SELECT COUNT(*) AS n FROM subscriptions")
        row = await cursor.fetchone()
        return int(row["n"]) if row else 0

    async def create(self, data: SubscriptionCreate) -> Subscription:
        subscription = Subscription(id=str(uuid4()), **data.model_dump())
        await self._db.execute(
            f"INSERT INTO subscriptions ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                subscription.id,
                subscription.merchant,
                subscription.merchant_logo,
                subscription.current_amount,
                subscription.previous_amount,
                subscription.billing_cycle,
                subscription.status,
                subscription.last_used_date.isoformat() if subscription.last_used_date else None,
                subscription.next_billing_date.isoformat(),
                subscription.category,
                int(subscription.auto_pay_enabled),
            ),
        )
        return subscription

    async def update(self, subscription_id: str, data: SubscriptionUpdate) -> Subscription | None:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return await self.get_by_id(subscription_id)

        assignments: list[str] = []
        params: list = []
        for column, value in changes.items():
            if column == "last_used_date" and value is not None:
                value = value.isoformat()
            elif column == "auto_pay_enabled" and value is not None:
                value = int(value)
            assignments.append(f"{column} = ?")
            params.append(value)
        params.append(subscription_id)

        cursor = await self._db.execute(
            f"UPDATE subscriptions SET {', '.join(assignments)} WHERE id = ?",
            params,
        )
        if cursor.rowcount == 0:
            return None
        return await self.get_by_id(subscription_id)
