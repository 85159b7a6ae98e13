from enum import StrEnum


class TransactionType(StrEnum):
    AUTO_PAY = "AUTO_PAY"
    MANUAL = "MANUAL"


class TransactionStatus(StrEnum):
    success = "success"
    blocked = "blocked"
    pending = "pending"
