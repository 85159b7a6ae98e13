from subguard.agents.models import AgentState
from subguard.schemas import CamelModel, UTCDateTime


class AgentStatus(CamelModel):
    name: str
    status: AgentState
    last_run: UTCDateTime
    observations: int = 0


class AgentStatusUpdate(CamelModel):
    status: AgentState | None = None
    last_run: UTCDateTime | None = None
    observations: int | None = None
