"""Schemas for the profile and its media."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from companion.domain.entities import VirtualSelfProfile


class ProfileResponse(BaseModel):
    profile: VirtualSelfProfile
    request_id: str


class AvatarRequest(BaseModel):
    ootd: Optional[str] = Field(default=None, max_length=1000)


class SpeechRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=4000)


class SpeechResponse(BaseModel):
    audio: str = Field(..., description="Base64 encoded PCM audio.")
    request_id: str
