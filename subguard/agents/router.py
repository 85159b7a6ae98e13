from fastapi import APIRouter

from subguard.agents.schemas import AgentStatus
from subguard.dependencies import PipelineServiceDep, StoreDep
from subguard.pipeline.schemas import PipelineResult

router = APIRouter()


@router.get("/status", response_model=list[AgentStatus])
async def get_agent_statuses(store: StoreDep) -> list[AgentStatus]:
    return await store.get_agent_statuses()


@router.post("/run", response_model=PipelineResult)
async def run_agents(service: PipelineServiceDep) -> PipelineResult:
    """Run the agent pipeline once. Failures are reported in the body, not as HTTP errors."""
    return await service.run()
