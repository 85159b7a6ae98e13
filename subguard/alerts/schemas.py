from pydantic import BaseModel

from subguard.alerts.models import AlertStatus, AnomalyType, ResolveAction, Severity
from subguard.schemas import CamelModel, UTCDateTime


class FinancialImpact(BaseModel):
    monthly: float
    yearly: float


class AlertCreate(CamelModel):
    type: AnomalyType
    severity: Severity
    subscription_id: str
    merchant: str
    title: str
    description: str
    financial_impact: FinancialImpact
    recommendation: str
    ai_explanation: str
    status: AlertStatus = AlertStatus.pending
    created_at: UTCDateTime
    old_amount: float | None = None
    new_amount: float | None = None

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.merchant, str(self.type))


class Alert(AlertCreate):
    id: str


class AlertUpdate(CamelModel):
    status: AlertStatus | None = None


class ResolveAlertRequest(CamelModel):
    action: ResolveAction


class ResolveAlertResponse(CamelModel):
    success: bool
    action: ResolveAction
    merchant: str


class DismissAlertResponse(CamelModel):
    success: bool
