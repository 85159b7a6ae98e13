from enum import StrEnum


class BillingCycle(StrEnum):
    monthly = "monthly"
    yearly = "yearly"


class SubscriptionStatus(StrEnum):
    active = "active"
    paused = "paused"
    cancelled = "cancelled"


class SubscriptionAction(StrEnum):
    cancel = "cancel"
    pause = "pause"
    resume = "resume"
