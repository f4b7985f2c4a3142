"""Experience library and guided question routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from companion.api.deps import get_action_guard, get_orchestrator
from companion.api.schemas.experiences import (
    GuidedAnswerRequest,
    GuidedAnswerResponse,
    GuidedQuestionResponse,
    LibraryResponse,
    RawInputRequest,
    RawInputResponse,
)
from companion.observability.metrics import log_metric
from companion.observability.tracing import trace
from companion.services import busy
from companion.services.busy import ActionGuard
from companion.services.orchestrator import ProfileOrchestrator

router = APIRouter()


@router.get("/experiences", response_model=LibraryResponse, tags=["experiences"])
def list_experiences(
    http_request: Request,
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
) -> LibraryResponse:
    """Return the library, most recent first."""
    request_id = getattr(http_request.state, "request_id", None)
    entries = orchestrator.state.library()
    log_metric("experiences.list.count", len(entries))
    return LibraryResponse(entries=entries, request_id=request_id or "")


@router.post("/experiences/raw", response_model=RawInputResponse, tags=["experiences"])
def ingest_raw_input(
    payload: RawInputRequest,
    http_request: Request,
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> RawInputResponse:
    """Split free text into experiences and refresh the profile from them."""
    request_id = getattr(http_request.state, "request_id", None)
    text = payload.text.strip()
    metadata = {"route": "/experiences/raw", "user_id": str(user_id), "text_length": len(text)}

    with trace("experiences.raw_input", metadata=metadata, user_id=str(user_id), request_id=request_id):
        with guard.hold(str(user_id), busy.LIBRARY, busy.PROFILE):
            outcome = orchestrator.ingest_raw_input(text)

    return RawInputResponse(
        entries=outcome.entries,
        profile=outcome.profile,
        companion_line=outcome.companion_line,
        request_id=request_id or "",
    )


@router.post("/experiences/answers", response_model=GuidedAnswerResponse, tags=["experiences"])
def answer_guided_question(
    payload: GuidedAnswerRequest,
    http_request: Request,
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> GuidedAnswerResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with guard.hold(str(user_id), busy.LIBRARY):
        entry = orchestrator.answer_guided_question(payload.question_id, payload.answer)
    log_metric("experiences.guided_answer", 1, metadata={"question_id": payload.question_id})
    return GuidedAnswerResponse(entry=entry, request_id=request_id or "")


@router.delete("/experiences/{entry_id}", response_model=LibraryResponse, tags=["experiences"])
def delete_experience(
    entry_id: str,
    http_request: Request,
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> LibraryResponse:
    """Remove one entry. The profile and plan are left as they are."""
    request_id = getattr(http_request.state, "request_id", None)
    with guard.hold(str(user_id), busy.LIBRARY):
        remaining = orchestrator.delete_entry(entry_id)
    return LibraryResponse(entries=remaining, request_id=request_id or "")


@router.get("/guided-questions/next", response_model=GuidedQuestionResponse, tags=["experiences"])
def next_guided_question(
    http_request: Request,
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
) -> GuidedQuestionResponse:
    request_id = getattr(http_request.state, "request_id", None)
    return GuidedQuestionResponse(question=orchestrator.next_guided_question(), request_id=request_id or "")
