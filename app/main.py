from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.container import Orchestrator
from app.settings import Settings, configure_logging
from execution.models import ValidationError

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[Orchestrator] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await app.state.orchestrator.start()
        try:
            yield
        finally:
            await app.state.orchestrator.stop()

    app = FastAPI(title="Chara Orchestrator", lifespan=lifespan)
    app.state.orchestrator = orchestrator or Orchestrator(settings)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=422, content=exc.to_dict())

    from .api import plans, reports, status, summaries
    app.include_router(status.router)
    app.include_router(plans.router)
    app.include_router(reports.router)
    app.include_router(summaries.router)

    return app
