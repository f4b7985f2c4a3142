"""Schemas for growth plans, tasks and retrospectives."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from companion.domain.entities import ActionTask, GrowthPlan, WeeklySummary


class PlanResponse(BaseModel):
    plan: Optional[GrowthPlan]
    tasks: List[ActionTask]
    request_id: str


class TaskListResponse(BaseModel):
    tasks: List[ActionTask]
    request_id: str


class TaskToggleResponse(BaseModel):
    task: ActionTask
    request_id: str


class CheckInRequest(BaseModel):
    with_audio: bool = False


class CheckInResponse(BaseModel):
    feedback: str
    audio: Optional[str] = None
    degraded: List[str] = []
    request_id: str


class WeeklySummaryResponse(BaseModel):
    summary: WeeklySummary
    request_id: str
