"""Route clearing all persisted companion state for a user."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from companion.api.deps import get_action_guard, get_orchestrator
from companion.services import busy
from companion.services.busy import ActionGuard
from companion.services.orchestrator import ProfileOrchestrator

router = APIRouter()


@router.delete("/state", status_code=status.HTTP_204_NO_CONTENT, tags=["state"])
def clear_state(
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> Response:
    with guard.hold(str(user_id), busy.LIBRARY, busy.PROFILE, busy.PLAN, busy.TASKS):
        orchestrator.reset()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
