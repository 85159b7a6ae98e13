from fastapi import APIRouter

from subguard.dashboard.schemas import DashboardSummary, MonthlyTrendPoint
from subguard.dependencies import DashboardServiceDep

router = APIRouter()


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(service: DashboardServiceDep) -> DashboardSummary:
    return await service.summary()


@router.get("/monthly-trend", response_model=list[MonthlyTrendPoint])
async def get_monthly_trend(service: DashboardServiceDep) -> list[MonthlyTrendPoint]:
    return await service.monthly_trend()
