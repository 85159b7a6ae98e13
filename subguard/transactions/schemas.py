from pydantic import Field

from subguard.schemas import CamelModel, UTCDateTime
from subguard.transactions.models import TransactionStatus, TransactionType


class TransactionCreate(CamelModel):
    date: UTCDateTime
    merchant: str
    merchant_logo: str | None = None
    amount: float = Field(gt=0)
    transaction_type: TransactionType
    status: TransactionStatus
    subscription_id: str | None = None
    category: str


class Transaction(TransactionCreate):
    id: str
