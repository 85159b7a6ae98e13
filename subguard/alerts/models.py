from enum import StrEnum


class AnomalyType(StrEnum):
    """Detected risk kinds. A persisted alert keeps the type of the anomaly behind it."""

    price_increase = "price_increase"
    unused_subscription = "unused_subscription"
    trial_to_paid = "trial_to_paid"
    duplicate_service = "duplicate_service"
    upcoming_renewal = "upcoming_renewal"


class Severity(StrEnum):
    high = "high"
    medium = "medium"
    low = "low"


class AlertStatus(StrEnum):
    pending = "pending"
    resolved = "resolved"
    dismissed = "dismissed"


class ResolveAction(StrEnum):
    cancel = "cancel"
    keep = "keep"
