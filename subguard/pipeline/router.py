from fastapi import APIRouter

from subguard.dependencies import PipelineServiceDep
from subguard.pipeline.schemas import SimulationResult

router = APIRouter()


@router.post("/autopay", response_model=SimulationResult)
async def simulate_autopay(service: PipelineServiceDep) -> SimulationResult:
    return await service.simulate_autopay()
