"""Exception handlers translating pipeline and orchestration errors into HTTP responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from companion.api.schemas.common import ErrorResponse
from companion.core.config import get_settings
from companion.observability.metrics import log_metric
from companion.services.ai.errors import FailureKind, PipelineFailure
from companion.services.busy import ActionInProgress
from companion.services.orchestrator import (
    EntryNotFound,
    InsufficientExperiences,
    OrchestrationError,
    ProfileMissing,
    TaskNotFound,
    UnknownQuestion,
)

logger = logging.getLogger(__name__)

FAILURE_STATUS = {
    FailureKind.QUOTA: status.HTTP_429_TOO_MANY_REQUESTS,
    FailureKind.AUTH: status.HTTP_401_UNAUTHORIZED,
}


def _error_body(request: Request, detail: str, kind: str | None = None) -> dict:
    return ErrorResponse(
        detail=detail,
        kind=kind,
        display_seconds=get_settings().error_display_seconds,
        request_id=getattr(request.state, "request_id", None),
    ).model_dump()


async def pipeline_failure_handler(request: Request, exc: PipelineFailure) -> JSONResponse:
    status_code = FAILURE_STATUS.get(exc.kind, status.HTTP_502_BAD_GATEWAY)
    logger.info("Returning %s for failed %s (%s)", status_code, exc.operation, exc.kind.value)
    log_metric("http.pipeline_failure", 1, {"route": request.url.path, "kind": exc.kind.value})
    return JSONResponse(status_code=status_code, content=_error_body(request, exc.message, exc.kind.value))


async def action_in_progress_handler(request: Request, exc: ActionInProgress) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body(request, str(exc), "BUSY"),
    )


async def orchestration_error_handler(request: Request, exc: OrchestrationError) -> JSONResponse:
    if isinstance(exc, (EntryNotFound, TaskNotFound, UnknownQuestion, ProfileMissing)):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InsufficientExperiences):
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=status_code, content=_error_body(request, str(exc)))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PipelineFailure, pipeline_failure_handler)
    app.add_exception_handler(ActionInProgress, action_in_progress_handler)
    app.add_exception_handler(OrchestrationError, orchestration_error_handler)
