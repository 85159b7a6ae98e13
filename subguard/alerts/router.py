from fastapi import APIRouter

from subguard.alerts.models import AlertStatus
from subguard.alerts.schemas import (
    Alert,
    DismissAlertResponse,
    ResolveAlertRequest,
    ResolveAlertResponse,
)
from subguard.dependencies import AlertServiceDep

router = APIRouter()


@router.get("/", response_model=list[Alert])
async def list_alerts(
    service: AlertServiceDep,
    status: AlertStatus | None = None,
) -> list[Alert]:
    return await service.list_all(status)


@router.post("/{alert_id}/resolve", response_model=ResolveAlertResponse)
async def resolve_alert(
    alert_id: str,
    data: ResolveAlertRequest,
    service: AlertServiceDep,
) -> ResolveAlertResponse:
    """Apply the user's decision on an alert. ``cancel`` also cancels the subscription."""
    return await service.resolve(alert_id, data.action)


@router.post("/{alert_id}/dismiss", response_model=DismissAlertResponse)
async def dismiss_alert(alert_id: str, service: AlertServiceDep) -> DismissAlertResponse:
    return await service.dismiss(alert_id)
