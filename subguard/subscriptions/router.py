from fastapi import APIRouter

from subguard.dependencies import SubscriptionServiceDep
from subguard.subscriptions.schemas import Subscription, SubscriptionActionRequest

router = APIRouter()


@router.get("/", response_model=list[Subscription])
async def list_subscriptions(service: SubscriptionServiceDep) -> list[Subscription]:
    return await service.list_all()


@router.get("/{subscription_id}", response_model=Subscription)
async def get_subscription(
    subscription_id: str,
    service: SubscriptionServiceDep,
) -> Subscription:
    return await service.get(subscription_id)


@router.patch("/{subscription_id}", response_model=Subscription)
async def update_subscription(
    subscription_id: str,
    data: SubscriptionActionRequest,
    service: SubscriptionServiceDep,
) -> Subscription:
    return await service.apply_action(subscription_id, data.action)
