"""Shared response shapes."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    detail: str
    kind: Optional[str] = None
    display_seconds: int
    request_id: Optional[str] = None
