"""Profile, avatar and speech routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from companion.api.deps import get_action_guard, get_orchestrator
from companion.api.schemas.profile import AvatarRequest, ProfileResponse, SpeechRequest, SpeechResponse
from companion.observability.tracing import trace
from companion.services import busy
from companion.services.busy import ActionGuard
from companion.services.orchestrator import ProfileMissing, ProfileOrchestrator

router = APIRouter()


@router.get("/profile", response_model=ProfileResponse, tags=["profile"])
def get_profile(
    http_request: Request,
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
) -> ProfileResponse:
    request_id = getattr(http_request.state, "request_id", None)
    profile = orchestrator.state.profile()
    if profile is None:
        raise ProfileMissing()
    return ProfileResponse(profile=profile, request_id=request_id or "")


@router.post("/profile/avatar", response_model=ProfileResponse, tags=["profile"])
def regenerate_avatar(
    payload: AvatarRequest,
    http_request: Request,
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> ProfileResponse:
    """Redraw the avatar from the stored outfit or a new one."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/profile/avatar", "user_id": str(user_id), "new_ootd": bool(payload.ootd)}
    with trace("profile.avatar", metadata=metadata, user_id=str(user_id), request_id=request_id):
        with guard.hold(str(user_id), busy.PROFILE):
            profile = orchestrator.regenerate_avatar(payload.ootd)
    return ProfileResponse(profile=profile, request_id=request_id or "")


@router.post("/profile/speech", response_model=SpeechResponse, tags=["profile"])
def synthesize_speech(
    payload: SpeechRequest,
    http_request: Request,
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> SpeechResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with guard.hold(str(user_id), busy.SPEECH):
        audio = orchestrator.speak(payload.text)
    return SpeechResponse(audio=audio, request_id=request_id or "")
