from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from app.api.deps import get_orchestrator
from app.container import Orchestrator
from summary import SummaryStream

router = APIRouter(prefix="/summaries", tags=["summaries"])


def _require_stream(summary_id: str, orchestrator: Orchestrator) -> SummaryStream:
    stream = orchestrator.summarizer.get(summary_id)
    if stream is None:
        raise HTTPException(status_code=404, detail=f"Unknown summary: {summary_id}")
    return stream


@router.get("/{summary_id}")
async def get_summary(summary_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)):
    return _require_stream(summary_id, orchestrator).to_dict()


async def _summary_event_stream(stream: SummaryStream) -> AsyncIterator[str]:
    async for event in stream.events():
        yield f"event: {event.kind.value}\ndata: {event.model_dump_json(by_alias=True)}\n\n"


@router.get("/{summary_id}/stream")
async def stream_summary(summary_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)):
    stream = _require_stream(summary_id, orchestrator)
    return StreamingResponse(_summary_event_stream(stream), media_type="text/event-stream")
