"""Per-run pipeline context.

A fresh ``PipelineContext`` is built for every run and handed to the graph
through the run config, so no stage reads module-level state and ``now`` can be
pinned in tests.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from subguard.agents.models import AgentName
from subguard.pipeline.agents import (
    ActionRecommendationAgent,
    AnomalyDetectionAgent,
    MonitoringAgent,
    ReasoningAgent,
    RiskPredictionAgent,
)
from subguard.pipeline.explainers import ExplanationProvider, TemplateExplanationProvider
from subguard.store import SubscriptionStore


def build_agents(explainer: ExplanationProvider | None = None) -> dict[str, object]:
    return {
        AgentName.monitoring: MonitoringAgent(),
        AgentName.anomaly_detection: AnomalyDetectionAgent(),
        AgentName.risk_prediction: RiskPredictionAgent(),
        AgentName.reasoning: ReasoningAgent(explainer or TemplateExplanationProvider()),
        AgentName.action: ActionRecommendationAgent(),
    }


@dataclass
class PipelineContext:
    store: SubscriptionStore
    now: datetime = field(default_factory=lambda: datetime.now(UTC))
    agents: dict[str, object] = field(default_factory=build_agents)
    run_id: str = field(default_factory=lambda: str(uuid4()))
    execution_log: list[str] = field(default_factory=list)

    def log(self, message: str) -> None:
        self.execution_log.append(message)
