from pydantic import Field, model_validator

from subguard.schemas import CamelModel, UTCDateTime
from subguard.subscriptions.models import BillingCycle, SubscriptionAction, SubscriptionStatus


class SubscriptionCreate(CamelModel):
    merchant: str = Field(min_length=1)
    merchant_logo: str | None = None
    current_amount: float = Field(gt=0)
    previous_amount: float | None = Field(default=None, gt=0)
    billing_cycle: BillingCycle
    status: SubscriptionStatus = SubscriptionStatus.active
    last_used_date: UTCDateTime | None = None
    next_billing_date: UTCDateTime
    category: str
    auto_pay_enabled: bool = True

    @model_validator(mode="after")
    def _drop_unchanged_previous_amount(self):
        # A "change" to the same amount is not a price change.
        if self.previous_amount is not None and self.previous_amount == self.current_amount:
            self.previous_amount = None
        return self


class Subscription(SubscriptionCreate):
    id: str


class SubscriptionUpdate(CamelModel):
    current_amount: float | None = Field(default=None, gt=0)
    previous_amount: float | None = Field(default=None, gt=0)
    status: SubscriptionStatus | None = None
    last_used_date: UTCDateTime | None = None
    auto_pay_enabled: bool | None = None


class SubscriptionActionRequest(CamelModel):
    action: SubscriptionAction
