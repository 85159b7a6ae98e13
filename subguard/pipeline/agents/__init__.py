from subguard.pipeline.agents.action import ActionRecommendationAgent
from subguard.pipeline.agents.anomaly import AnomalyDetectionAgent
from subguard.pipeline.agents.monitoring import MonitoringAgent
from subguard.pipeline.agents.reasoning import ReasoningAgent
from subguard.pipeline.agents.risk import RiskPredictionAgent

__all__ = [
    "ActionRecommendationAgent",
    "AnomalyDetectionAgent",
    "MonitoringAgent",
    "ReasoningAgent",
    "RiskPredictionAgent",
]
