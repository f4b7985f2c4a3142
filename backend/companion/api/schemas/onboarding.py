"""Schemas for onboarding."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel

from companion.domain.entities import ExperienceEntry, OnboardingAnswers, VirtualSelfProfile


class OnboardingRequest(OnboardingAnswers):
    pass


class OnboardingResponse(BaseModel):
    profile: VirtualSelfProfile
    entries: List[ExperienceEntry]
    avatar_degraded: bool
    request_id: str
