"""Growth plan, task and weekly retrospective routes."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from companion.api.deps import get_action_guard, get_orchestrator
from companion.api.schemas.plan import (
    CheckInRequest,
    CheckInResponse,
    PlanResponse,
    TaskListResponse,
    TaskToggleResponse,
    WeeklySummaryResponse,
)
from companion.observability.metrics import log_metric
from companion.observability.tracing import trace
from companion.services import busy
from companion.services.busy import ActionGuard
from companion.services.orchestrator import ProfileOrchestrator

router = APIRouter()


@router.get("/plan", response_model=PlanResponse, tags=["plan"])
def get_plan(
    http_request: Request,
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
) -> PlanResponse:
    request_id = getattr(http_request.state, "request_id", None)
    return PlanResponse(
        plan=orchestrator.state.plan(),
        tasks=orchestrator.state.tasks(),
        request_id=request_id or "",
    )


@router.post("/plan", response_model=PlanResponse, tags=["plan"])
def generate_plan(
    http_request: Request,
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> PlanResponse:
    """Generate or regenerate the growth plan. Regeneration replaces every task."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/plan", "user_id": str(user_id)}
    with trace("plan.generate", metadata=metadata, user_id=str(user_id), request_id=request_id):
        with guard.hold(str(user_id), busy.LIBRARY, busy.PROFILE, busy.PLAN, busy.TASKS):
            outcome = orchestrator.generate_plan()
    log_metric("plan.generate.success", 1, metadata={"user_id": str(user_id)})
    return PlanResponse(plan=outcome.plan, tasks=outcome.tasks, request_id=request_id or "")


@router.get("/tasks", response_model=TaskListResponse, tags=["tasks"])
def list_tasks(
    http_request: Request,
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
) -> TaskListResponse:
    request_id = getattr(http_request.state, "request_id", None)
    tasks = orchestrator.state.tasks()
    log_metric("task.list.count", len(tasks))
    return TaskListResponse(tasks=tasks, request_id=request_id or "")


@router.post("/tasks/check-in", response_model=CheckInResponse, tags=["tasks"])
def check_in(
    http_request: Request,
    payload: Optional[CheckInRequest] = None,
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> CheckInResponse:
    """Ask the companion for feedback on task progress."""
    request_id = getattr(http_request.state, "request_id", None)
    with_audio = payload.with_audio if payload else False
    with trace("tasks.check_in", metadata={"with_audio": with_audio}, user_id=str(user_id), request_id=request_id):
        with guard.hold(str(user_id), busy.CHECK_IN):
            outcome = orchestrator.check_in(with_audio=with_audio)
    return CheckInResponse(
        feedback=outcome.feedback,
        audio=outcome.audio,
        degraded=outcome.degraded,
        request_id=request_id or "",
    )


@router.post("/tasks/{task_id}/toggle", response_model=TaskToggleResponse, tags=["tasks"])
def toggle_task(
    task_id: str,
    http_request: Request,
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> TaskToggleResponse:
    """Mark a task done for today, or undo today's completion."""
    request_id = getattr(http_request.state, "request_id", None)
    with guard.hold(str(user_id), busy.TASKS):
        task = orchestrator.toggle_task(task_id)
    log_metric("task.toggle.success", 1, metadata={"user_id": str(user_id)})
    return TaskToggleResponse(task=task, request_id=request_id or "")


@router.post("/weekly-summary", response_model=WeeklySummaryResponse, tags=["plan"])
def weekly_summary(
    http_request: Request,
    user_id: UUID = Query(...),
    orchestrator: ProfileOrchestrator = Depends(get_orchestrator),
    guard: ActionGuard = Depends(get_action_guard),
) -> WeeklySummaryResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("weekly_summary.generate", metadata={"route": "/weekly-summary"}, user_id=str(user_id), request_id=request_id):
        with guard.hold(str(user_id), busy.SUMMARY):
            summary = orchestrator.weekly_summary()
    return WeeklySummaryResponse(summary=summary, request_id=request_id or "")
