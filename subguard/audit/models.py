from enum import StrEnum


class AuditAction(StrEnum):
    alert_created = "alert_created"
    alert_resolved = "alert_resolved"
    alert_dismissed = "alert_dismissed"
    subscription_cancelled = "subscription_cancelled"
    subscription_paused = "subscription_paused"
    subscription_resumed = "subscription_resumed"
    agent_run = "agent_run"


class AuditEntityType(StrEnum):
    alert = "alert"
    subscription = "subscription"
    agent = "agent"
