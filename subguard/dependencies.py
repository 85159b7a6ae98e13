from typing import Annotated

from fastapi import Depends

from subguard.alerts.service import AlertService
from subguard.dashboard.service import DashboardService
from subguard.database import get_db
from subguard.pipeline.service import PipelineService
from subguard.store import SQLiteStore
from subguard.subscriptions.service import SubscriptionService


def get_store() -> SQLiteStore:
    return SQLiteStore(get_db())


def get_subscription_service() -> SubscriptionService:
    return SubscriptionService(get_store())


def get_alert_service() -> AlertService:
    return AlertService(get_store())


def get_dashboard_service() -> DashboardService:
    return DashboardService(get_store())


def get_pipeline_service() -> PipelineService:
    return PipelineService(get_store())


StoreDep = Annotated[SQLiteStore, Depends(get_store)]
SubscriptionServiceDep = Annotated[SubscriptionService, Depends(get_subscription_service)]
AlertServiceDep = Annotated[AlertService, Depends(get_alert_service)]
DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
PipelineServiceDep = Annotated[PipelineService, Depends(get_pipeline_service)]
