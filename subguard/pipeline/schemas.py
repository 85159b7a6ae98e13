"""Data passed between the five pipeline stages.

Stage outputs are frozen dataclasses that live for a single run. Anomaly
payloads are one dataclass per anomaly type, so consumers pattern-match on the
payload instead of reading keys out of a dict. The API-facing results at the
bottom are pydantic models serialised with camelCase keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypedDict

from subguard.alerts.models import AnomalyType, Severity
from subguard.alerts.schemas import AlertCreate
from subguard.schemas import CamelModel
from subguard.subscriptions.models import BillingCycle
from subguard.subscriptions.schemas import Subscription
from subguard.transactions.schemas import Transaction

# ---------------------------------------------------------------------------
# Observation stage
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PriceChange:
    subscription: Subscription
    old_amount: float
    new_amount: float
    percentage_change: int


@dataclass(frozen=True)
class UnusedSubscription:
    subscription: Subscription
    days_since_last_use: int


@dataclass(frozen=True)
class UpcomingRenewal:
    subscription: Subscription
    days_until_renewal: int


@dataclass(frozen=True)
class ObservedPatterns:
    price_changes: list[PriceChange] = field(default_factory=list)
    unused_subscriptions: list[UnusedSubscription] = field(default_factory=list)
    upcoming_renewals: list[UpcomingRenewal] = field(default_factory=list)


@dataclass(frozen=True)
class MonitoringResult:
    subscriptions: list[Subscription]
    transactions: list[Transaction]
    patterns: ObservedPatterns


# ---------------------------------------------------------------------------
# Anomaly stage
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PriceIncreaseData:
    old_amount: float
    new_amount: float
    percentage_change: int
    billing_cycle: BillingCycle


@dataclass(frozen=True)
class UnusedSubscriptionData:
    days_since_last_use: int
    amount: float
    billing_cycle: BillingCycle


@dataclass(frozen=True)
class UpcomingRenewalData:
    days_until_renewal: int
    amount: float
    billing_cycle: BillingCycle = BillingCycle.yearly


@dataclass(frozen=True)
class DuplicateMember:
    id: str
    merchant: str
    amount: float


@dataclass(frozen=True)
class DuplicateServiceData:
    category: str
    subscriptions: tuple[DuplicateMember, ...]
    total_monthly_cost: float


@dataclass(frozen=True)
class TrialToPaidData:
    amount: float
    billing_cycle: BillingCycle


AnomalyData = (
    PriceIncreaseData
    | UnusedSubscriptionData
    | UpcomingRenewalData
    | DuplicateServiceData
    | TrialToPaidData
)


@dataclass(frozen=True)
class Anomaly:
    type: AnomalyType
    subscription_id: str
    merchant: str
    severity: Severity
    data: AnomalyData


# ---------------------------------------------------------------------------
# Risk and explanation stages
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RiskAssessment:
    anomaly: Anomaly
    monthly_loss: int
    yearly_loss: int
    risk_level: Severity
    urgency: int


@dataclass(frozen=True)
class Explanation:
    title: str
    description: str
    ai_explanation: str
    recommendation: str


@dataclass(frozen=True)
class ReasonedAlert:
    assessment: RiskAssessment
    title: str
    description: str
    ai_explanation: str
    recommendation: str


# ---------------------------------------------------------------------------
# Recommendation stage and run result
# ---------------------------------------------------------------------------


class ActionRecommendation(CamelModel):
    alert: AlertCreate
    available_actions: list[str]
    suggested_action: str
    risk_level: Severity
    urgency: int
    requires_user_approval: Literal[True] = True


@dataclass(frozen=True)
class ActionOutcome:
    recommendations: list[ActionRecommendation]
    new_alerts: int
    total_potential_savings: float


class PipelineResult(CamelModel):
    success: bool
    recommendations: list[ActionRecommendation] = []
    new_alerts: int = 0
    total_potential_savings: float = 0
    execution_log: list[str] = []


class SimulatedCharge(CamelModel):
    id: str
    merchant: str
    amount: float
    price_increased: bool
    percentage_increase: int | None = None


class SimulationResult(PipelineResult):
    transaction: SimulatedCharge
    message: str


class PipelineState(TypedDict, total=False):
    subscriptions: list[Subscription]
    transactions: list[Transaction]
    monitoring_result: MonitoringResult
    anomalies: list[Anomaly]
    risk_assessments: list[RiskAssessment]
    reasoned_alerts: list[ReasonedAlert]
    recommendations: list[ActionRecommendation]
    new_alerts: int
    total_potential_savings: float
