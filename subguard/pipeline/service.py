"""Pipeline service: manual runs and the simulated auto-pay trigger."""

import random
from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from subguard.exceptions import ValidationError
from subguard.pipeline.calc import round_half_up
from subguard.pipeline.context import PipelineContext, build_agents
from subguard.pipeline.explainers import ExplanationProvider, build_explanation_provider
from subguard.pipeline.orchestrator import run_pipeline
from subguard.pipeline.schemas import PipelineResult, SimulatedCharge, SimulationResult
from subguard.store import SubscriptionStore
from subguard.subscriptions.models import SubscriptionStatus
from subguard.subscriptions.schemas import SubscriptionUpdate
from subguard.transactions.models import TransactionStatus, TransactionType
from subguard.transactions.schemas import TransactionCreate

logger = structlog.get_logger()

PRICE_HIKE_PROBABILITY = 0.3
PRICE_HIKE_MIN_PCT = 15
PRICE_HIKE_MAX_PCT = 34


class PipelineService:
    def __init__(
        self,
        store: SubscriptionStore,
        explainer: ExplanationProvider | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._explainer = explainer
        self._rng = rng or random.Random()
        self._clock = clock or (lambda: datetime.now(UTC))

    async def run(self) -> PipelineResult:
        explainer = self._explainer or build_explanation_provider()
        ctx = PipelineContext(
            store=self._store,
            now=self._clock(),
            agents=build_agents(explainer),
        )
        return await run_pipeline(ctx)

    async def simulate_autopay(self) -> SimulationResult:
        """Charge a random active auto-pay subscription, sometimes at a higher price, then run."""
        subscriptions = await self._store.get_subscriptions()
        candidates = [
            sub
            for sub in subscriptions
            if sub.status == SubscriptionStatus.active and sub.auto_pay_enabled
        ]
        if not candidates:
            raise ValidationError("No active subscriptions with auto-pay enabled")

        subscription = self._rng.choice(candidates)
        amount = subscription.current_amount
        percentage_increase: int | None = None

        if self._rng.random() < PRICE_HIKE_PROBABILITY:
            pct = self._rng.randint(PRICE_HIKE_MIN_PCT, PRICE_HIKE_MAX_PCT)
            raised = round_half_up(amount * (1 + pct / 100))
            if raised != amount:
                await self._store.update_subscription(
                    subscription.id,
                    SubscriptionUpdate(previous_amount=amount, current_amount=raised),
                )
                logger.info(
                    "simulated_price_increase",
                    merchant=subscription.merchant,
                    old_amount=amount,
                    new_amount=raised,
                    percentage_increase=pct,
                )
                amount = raised
                percentage_increase = pct

        transaction = await self._store.create_transaction(
            TransactionCreate(
                date=self._clock(),
                merchant=subscription.merchant,
                merchant_logo=subscription.merchant_logo,
                amount=amount,
                transaction_type=TransactionType.AUTO_PAY,
                status=TransactionStatus.success,
                subscription_id=subscription.id,
                category=subscription.category,
            )
        )

        result = await self.run()

        price_increased = percentage_increase is not None
        if price_increased:
            message = (
                f"{subscription.merchant} price increased by {percentage_increase}% "
                "- AI agents detected anomaly!"
            )
        else:
            message = f"{subscription.merchant} auto-pay processed - AI agents analyzed"

        return SimulationResult(
            **result.model_dump(),
            transaction=SimulatedCharge(
                id=transaction.id,
                merchant=subscription.merchant,
                amount=amount,
                price_increased=price_increased,
                percentage_increase=percentage_increase,
            ),
            message=message,
        )
