from enum import StrEnum


class AgentState(StrEnum):
    active = "active"
    idle = "idle"
    processing = "processing"


class AgentName(StrEnum):
    monitoring = "Monitoring Agent"
    anomaly_detection = "Anomaly Detection Agent"
    risk_prediction = "Risk Prediction Agent"
    reasoning = "Reasoning Agent"
    action = "Action Recommendation Agent"
