"""Pipeline orchestrator graph.

  fetch_data -> monitoring -> anomaly_detection --(anomalies?)--> risk_prediction
                                                 |                  -> reasoning -> action -> END
                                                 +--(none)--> END

Runs are strictly sequential and serialised behind a single lock. Each stage
node flips its agent status to ``processing`` before running and back to
``active`` afterwards. Any exception aborts the run; alerts written before the
failure stay written.
"""

import asyncio
from typing import TypeVar

import structlog
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph

from subguard.agents.models import AgentName, AgentState
from subguard.agents.schemas import AgentStatusUpdate
from subguard.audit.models import AuditAction, AuditEntityType
from subguard.exceptions import AgentNotFoundError, DataFetchError
from subguard.pipeline.agents import (
    ActionRecommendationAgent,
    AnomalyDetectionAgent,
    MonitoringAgent,
    ReasoningAgent,
    RiskPredictionAgent,
)
from subguard.pipeline.context import PipelineContext
from subguard.pipeline.schemas import PipelineResult, PipelineState

logger = structlog.get_logger()

_run_lock = asyncio.Lock()

AgentT = TypeVar("AgentT")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _context(config: RunnableConfig) -> PipelineContext:
    return config["configurable"]["context"]


def _agent(ctx: PipelineContext, name: str, kind: type[AgentT]) -> AgentT:
    agent = ctx.agents.get(name)
    if not isinstance(agent, kind):
        raise AgentNotFoundError(name)
    return agent


async def _mark_processing(ctx: PipelineContext, name: str) -> None:
    await ctx.store.update_agent_status(
        name,
        AgentStatusUpdate(status=AgentState.processing, last_run=ctx.now),
    )


async def _mark_active(ctx: PipelineContext, name: str, observed: int) -> None:
    statuses = await ctx.store.get_agent_statuses()
    current = next((s.observations for s in statuses if s.name == name), 0)
    await ctx.store.update_agent_status(
        name,
        AgentStatusUpdate(status=AgentState.active, observations=current + observed),
    )


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


async def fetch_data(state: PipelineState, config: RunnableConfig) -> dict:
    ctx = _context(config)
    ctx.log("[Step 1/5] Fetching data from database...")

    try:
        subscriptions = await ctx.store.get_subscriptions()
        transactions = await ctx.store.get_transactions()
    except Exception as exc:
        raise DataFetchError(str(exc)) from exc

    ctx.log(f"Loaded {len(subscriptions)} subscriptions, {len(transactions)} transactions")
    logger.info(
        "fetch_data",
        subscriptions=len(subscriptions),
        transactions=len(transactions),
    )
    return {"subscriptions": subscriptions, "transactions": transactions}


async def monitoring(state: PipelineState, config: RunnableConfig) -> dict:
    ctx = _context(config)
    agent = _agent(ctx, AgentName.monitoring, MonitoringAgent)
    ctx.log("[Step 2/5] Running Monitoring Agent...")

    await _mark_processing(ctx, agent.name)
    result = agent.observe(state.get("subscriptions", []), state.get("transactions", []), ctx.now)
    await _mark_active(ctx, agent.name, observed=1)

    patterns = result.patterns
    ctx.log(
        f"Found {len(patterns.price_changes)} price changes, "
        f"{len(patterns.unused_subscriptions)} unused, "
        f"{len(patterns.upcoming_renewals)} renewals"
    )
    return {"monitoring_result": result}


async def anomaly_detection(state: PipelineState, config: RunnableConfig) -> dict:
    ctx = _context(config)
    agent = _agent(ctx, AgentName.anomaly_detection, AnomalyDetectionAgent)
    ctx.log("[Step 3/5] Running Anomaly Detection Agent...")

    await _mark_processing(ctx, agent.name)
    anomalies = agent.detect(state["monitoring_result"])
    await _mark_active(ctx, agent.name, observed=len(anomalies))

    ctx.log(f"Detected {len(anomalies)} anomalies")
    return {"anomalies": anomalies}


async def risk_prediction(state: PipelineState, config: RunnableConfig) -> dict:
    ctx = _context(config)
    agent = _agent(ctx, AgentName.risk_prediction, RiskPredictionAgent)
    ctx.log("[Step 4/5] Running Risk Prediction Agent...")

    await _mark_processing(ctx, agent.name)
    assessments = agent.assess(state.get("anomalies", []))
    await _mark_active(ctx, agent.name, observed=len(assessments))

    ctx.log(f"Assessed {len(assessments)} risks")
    return {"risk_assessments": assessments}


async def reasoning(state: PipelineState, config: RunnableConfig) -> dict:
    ctx = _context(config)
    agent = _agent(ctx, AgentName.reasoning, ReasoningAgent)
    ctx.log("[Step 5/5] Running Reasoning & Action Agents...")

    await _mark_processing(ctx, agent.name)
    reasoned = await agent.explain(state.get("risk_assessments", []))
    await _mark_active(ctx, agent.name, observed=len(reasoned))

    return {"reasoned_alerts": reasoned}


async def action(state: PipelineState, config: RunnableConfig) -> dict:
    ctx = _context(config)
    agent = _agent(ctx, AgentName.action, ActionRecommendationAgent)

    await _mark_processing(ctx, agent.name)
    outcome = await agent.act(state.get("reasoned_alerts", []), ctx.store, ctx.now)
    await _mark_active(ctx, agent.name, observed=len(outcome.recommendations))

    ctx.log(
        f"Created {outcome.new_alerts} new alerts, "
        f"potential savings: {outcome.total_potential_savings:.0f}/year"
    )
    return {
        "recommendations": outcome.recommendations,
        "new_alerts": outcome.new_alerts,
        "total_potential_savings": outcome.total_potential_savings,
    }


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


def route_after_anomalies(state: PipelineState) -> str:
    """Skip the remaining stages when nothing was detected."""
    if not state.get("anomalies"):
        return END
    return "risk_prediction"


# ---------------------------------------------------------------------------
# Build the pipeline graph
# ---------------------------------------------------------------------------

workflow = StateGraph(PipelineState)

workflow.add_node("fetch_data", fetch_data)
workflow.add_node("monitoring", monitoring)
workflow.add_node("anomaly_detection", anomaly_detection)
workflow.add_node("risk_prediction", risk_prediction)
workflow.add_node("reasoning", reasoning)
workflow.add_node("action", action)

workflow.add_edge(START, "fetch_data")
workflow.add_edge("fetch_data", "monitoring")
workflow.add_edge("monitoring", "anomaly_detection")
workflow.add_conditional_edges(
    "anomaly_detection",
    route_after_anomalies,
    {
        "risk_prediction": "risk_prediction",
        END: END,
    },
)
workflow.add_edge("risk_prediction", "reasoning")
workflow.add_edge("reasoning", "action")
workflow.add_edge("action", END)

pipeline_graph = workflow.compile()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def run_pipeline(ctx: PipelineContext) -> PipelineResult:
    """Run the five stages once. Never raises: failures come back as success=False."""
    async with _run_lock:
        with structlog.contextvars.bound_contextvars(run_id=ctx.run_id):
            return await _execute(ctx)


async def _execute(ctx: PipelineContext) -> PipelineResult:
    logger.info("pipeline_started")

    try:
        final = await pipeline_graph.ainvoke(
            {},
            config={"configurable": {"context": ctx}, "recursion_limit": 25},
        )
        if not final.get("anomalies"):
            ctx.log("No anomalies detected, ending pipeline early")

        result = PipelineResult(
            success=True,
            recommendations=final.get("recommendations", []),
            new_alerts=final.get("new_alerts", 0),
            total_potential_savings=final.get("total_potential_savings", 0),
            execution_log=ctx.execution_log,
        )
        await ctx.store.record_audit(
            AuditAction.agent_run,
            AuditEntityType.agent,
            ctx.run_id,
            f"Pipeline run: {result.new_alerts} new alerts, "
            f"{len(result.recommendations)} recommendations",
            user_approved=False,
        )
    except Exception as exc:
        logger.error("pipeline_failed", error_type=type(exc).__name__, error=str(exc))
        ctx.log(f"Error: {exc}")
        return PipelineResult(success=False, execution_log=ctx.execution_log)

    logger.info(
        "pipeline_complete",
        new_alerts=result.new_alerts,
        recommendations=len(result.recommendations),
        total_potential_savings=result.total_potential_savings,
    )
    return result
