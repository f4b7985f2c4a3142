"""Onboarding API route."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from companion.api.deps import get_action_guard, get_orchestrator
from companion.api.schemas.onboarding import OnboardingRequest, OnboardingResponse
from companion.db.session import get_db
from companion.observability.metrics import log_metric
from companion.observability.tracing import trace
from companion.services import busy
from companion.services.busy import ActionGuard
from companion.services.orchestrator import ProfileOrchestrator
from companion.services.users import mark_onboarded

router = APIRouter()


@router.post("/onboarding", response_model=OnboardingResponse, tags=["onboarding"])
def complete_onboarding(
    payload: OnboardingRequest,
    http_request: Request,
    user_id: UUID = Query(..., description="User completing onboarding"),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
    db: Session = Depends(get_db),
) -> OnboardingResponse:
    """Build the initial profile and experience library from the questionnaire."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/onboarding", "user_id": str(user_id), "gender": payload.gender.value}

    with trace("onboarding.complete", metadata=metadata, user_id=str(user_id), request_id=request_id):
        with guard.hold(str(user_id), busy.LIBRARY, busy.PROFILE):
            outcome = orchestrator.complete_onboarding(payload)
        mark_onboarded(db, user_id)

    log_metric("onboarding.entries", len(outcome.entries), metadata={"user_id": str(user_id)})
    return OnboardingResponse(
        profile=outcome.profile,
        entries=outcome.entries,
        avatar_degraded=outcome.avatar_degraded,
        request_id=request_id or "",
    )
