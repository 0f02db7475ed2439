from fastapi import APIRouter, Depends

from app.api.deps import get_orchestrator
from app.container import Orchestrator

router = APIRouter(tags=["status"])


@router.get("/status")
async def get_status(orchestrator: Orchestrator = Depends(get_orchestrator)):
    status = orchestrator.aggregator.status()
    return {
        "aggregatorState": status.state.value,
        "connectedProviderCount": status.connected_providers,
    }


@router.get("/capabilities")
async def list_capabilities(orchestrator: Orchestrator = Depends(get_orchestrator)):
    return orchestrator.aggregator.registry.describe()
