from fastapi import APIRouter, Depends

from app.api.deps import get_orchestrator
from app.container import Orchestrator
from execution.models import ExecutionReport, SubmitReceipt

router = APIRouter(tags=["reports"])


@router.post("/reports", response_model=SubmitReceipt, response_model_by_alias=True)
async def submit_report(
    report: ExecutionReport,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    return await orchestrator.collector.submit_report(report)
