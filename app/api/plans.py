from typing import AsyncIterator
import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.api.deps import get_orchestrator
from app.container import Orchestrator
from events import PLAN_DISPATCHED
from execution.models import ActionPlan

logger = logging.getLogger(__name__)

router = APIRouter(tags=["plans"])


@router.post("/plans", status_code=202)
async def dispatch_plan(
    plan: ActionPlan,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    delivered = orchestrator.dispatcher.dispatch(plan)
    return {"dispatched": True, "subscribers": delivered}


async def _plan_event_stream(orchestrator: Orchestrator) -> AsyncIterator[str]:
    queue: asyncio.Queue = asyncio.Queue()
    loop = asyncio.get_running_loop()

    def enqueue(plan: ActionPlan):
        loop.call_soon_threadsafe(queue.put_nowait, plan)

    subscription = orchestrator.bus.subscribe(PLAN_DISPATCHED, enqueue)
    logger.info("Plan runner attached")
    try:
        while True:
            plan = await queue.get()
            yield f"event: plan\ndata: {plan.model_dump_json(by_alias=True)}\n\n"
    finally:
        subscription.cancel()
        logger.info("Plan runner detached")


@router.get("/events/plans")
async def stream_plans(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Server-sent events for the external runner, one per dispatched plan"""
    return StreamingResponse(_plan_event_stream(orchestrator), media_type="text/event-stream")
