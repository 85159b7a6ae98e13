from uuid import uuid4

import aiosqlite

from subguard.transactions.schemas import Transaction, TransactionCreate

_COLUMNS = (
    "id, date, merchant, merchant_logo, amount, transaction_type, status, subscription_id, category"
)


class TransactionRepository:
    """Transactions are append-only: no update or delete."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def list_all(self) -> list[Transaction]:
        cursor = await self._db.execute(f"SELECT {_COLUMNS} FROM transactions ORDER BY date DESC")
        rows = await cursor.fetchall()
        return [Transaction.model_validate(dict(row)) for row in rows]

    async def create(self, data: TransactionCreate) -> Transaction:
        transaction = Transaction(id=str(uuid4()), **data.model_dump())
        await self._db.execute(
            f"INSERT INTO transactions ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                transaction.id,
                transaction.date.isoformat(),
                transaction.merchant,
                transaction.merchant_logo,
                transaction.amount,
                transaction.transaction_type,
                transaction.status,
                transaction.subscription_id,
                transaction.category,
            ),
        )
        return transaction
