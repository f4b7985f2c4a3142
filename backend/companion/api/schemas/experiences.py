"""Schemas for the experience library and guided questions."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from companion.domain.entities import ExperienceEntry, GuidedQuestion, VirtualSelfProfile


class RawInputRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=4000)


class RawInputResponse(BaseModel):
    entries: List[ExperienceEntry]
    profile: VirtualSelfProfile
    companion_line: str
    request_id: str


class GuidedAnswerRequest(BaseModel):
    question_id: str
    answer: str = Field(..., min_length=1, max_length=4000)


class GuidedAnswerResponse(BaseModel):
    entry: ExperienceEntry
    request_id: str


class LibraryResponse(BaseModel):
    entries: List[ExperienceEntry]
    request_id: str


class GuidedQuestionResponse(BaseModel):
    question: GuidedQuestion
    request_id: str
