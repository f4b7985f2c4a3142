"""Domain entities shared by the AI pipeline, the orchestrator and the API."""
from __future__ import annotations

import time
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


class ExperienceCategory(str, Enum):
    CAREER = "CAREER"
    ACHIEVEMENT = "ACHIEVEMENT"
    JOY = "JOY"
    CHOICE_REGRET = "CHOICE_REGRET"
    INTEREST = "INTEREST"
    ABILITY_SHORTCOMING = "ABILITY_SHORTCOMING"
    VISION = "VISION"
    ANXIETY = "ANXIETY"
    PERSONAL = "PERSONAL"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    NON_BINARY = "NON_BINARY"


class TaskFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    ONCE = "ONCE"


def new_id() -> str:
    """Opaque identifier for entries and tasks."""
    return uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


class ExperienceEntry(BaseModel):
    """One recorded life event."""

    id: str = Field(default_factory=new_id)
    timestamp: int = Field(default_factory=now_ms)
    content: str
    category: ExperienceCategory = ExperienceCategory.PERSONAL
    tags: List[str] = Field(default_factory=list)


class VirtualSelfProfile(BaseModel):
    """The synthesized personality model of the user's virtual self."""

    gender: Gender
    core_values: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    shortcomings: List[str] = Field(default_factory=list)
    growth_suggestions: List[str] = Field(default_factory=list)
    joy_triggers: List[str] = Field(default_factory=list)
    interest_directions: List[str] = Field(default_factory=list)
    summary: str = ""
    mood: str = ""
    affinity: int = 50
    avatar_url: Optional[str] = None
    ootd: Optional[str] = None
    initialized: bool = False


class GrowthDirection(BaseModel):
    title: str
    reasoning: str
    fit: str


class SuggestedTask(BaseModel):
    title: str
    frequency: TaskFrequency

    @field_validator("frequency", mode="before")
    @classmethod
    def _fold_frequency(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class GrowthPlan(BaseModel):
    core_values_analysis: str
    directions: List[GrowthDirection]
    short_term: List[str]
    mid_term: List[str]
    action_guide: str
    suggested_tasks: List[SuggestedTask]


class ActionTask(BaseModel):
    """A trackable commitment derived from a growth plan."""

    id: str = Field(default_factory=new_id)
    title: str
    frequency: TaskFrequency
    completed_dates: List[str] = Field(default_factory=list)
    last_completed: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)


class WeeklySummary(BaseModel):
    period: str
    summary: str
    value_shifts: str
    top_insights: List[str]
    generated_at: int


class OnboardingAnswers(BaseModel):
    gender: Gender
    basic_info: str = Field(..., min_length=1, max_length=2000)
    satisfactions: str = Field(..., min_length=1, max_length=2000)
    anxieties: str = Field(..., min_length=1, max_length=2000)
    vision: str = Field(..., min_length=1, max_length=2000)
    anti_life: str = Field(..., min_length=1, max_length=2000)


class GuidedQuestion(BaseModel):
    id: str
    question: str
    category: ExperienceCategory
