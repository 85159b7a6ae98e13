from subguard.alerts.models import Severity
from subguard.schemas import CamelModel


class DashboardSummary(CamelModel):
    total_subscriptions: int
    active_subscriptions: int
    monthly_spend: int
    yearly_projected_spend: int
    potential_savings: int
    pending_alerts: int
    risk_score: Severity


class MonthlyTrendPoint(CamelModel):
    month: str
    amount: int
