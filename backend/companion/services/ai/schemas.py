"""Output shapes the remote model must satisfy for each structured operation."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from companion.domain.entities import ExperienceCategory


class ProfileDraft(BaseModel):
    """Profile fields synthesized by the model; gender and avatar are never trusted from it."""

    core_values: List[str]
    strengths: List[str]
    shortcomings: List[str]
    growth_suggestions: List[str]
    joy_triggers: List[str]
    interest_directions: List[str]
    summary: str
    mood: str
    affinity: int = Field(..., description="Closeness to the user, 0-100.")
    ootd: Optional[str] = Field(default=None, description="Outfit description used to draw the avatar.")

    @field_validator("affinity", mode="before")
    @classmethod
    def _clamp_affinity(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return max(0, min(100, int(round(value))))
        return value


class RawEntry(BaseModel):
    content: str = Field(..., min_length=1)
    category: Optional[str] = Field(
        default=None,
        description="One of CAREER, ACHIEVEMENT, JOY, CHOICE_REGRET, INTEREST, ABILITY_SHORTCOMING, VISION, ANXIETY, PERSONAL.",
    )
    tags: List[str] = Field(default_factory=list)


class OnboardingReply(BaseModel):
    profile: ProfileDraft
    entries: List[RawEntry] = Field(..., min_length=1)


class RawInputReply(BaseModel):
    entries: List[RawEntry]


class WeeklySummaryReply(BaseModel):
    period: str
    summary: str
    value_shifts: str
    top_insights: List[str]


class EntryDraft(BaseModel):
    """An experience extracted from free text, before ids and timestamps are assigned."""

    content: str
    category: ExperienceCategory
    tags: List[str] = Field(default_factory=list)
