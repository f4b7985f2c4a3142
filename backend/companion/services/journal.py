"""Action journal recording the outcome of orchestrated user actions."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from companion.core.context import get_request_id
from companion.db.models.action_log import ActionLog
from companion.services.users import get_or_create_user

logger = logging.getLogger(__name__)

ONBOARDING_COMPLETED = "onboarding_completed"
AVATAR_DEGRADED = "avatar_degraded"
ENTRIES_INGESTED = "entries_ingested"
PROFILE_UPDATE_FAILED = "profile_update_failed"
PLAN_GENERATED = "plan_generated"
TASK_TOGGLED = "task_toggled"


class ActionJournal:
    def record(self, action_type: str, payload: Optional[Dict[str, Any]] = None, *, reason: str | None = None) -> None:
        raise NotImplementedError


class NullJournal(ActionJournal):
    def record(self, action_type: str, payload: Optional[Dict[str, Any]] = None, *, reason: str | None = None) -> None:
        logger.debug("Journal disabled, dropping %s", action_type)


class MemoryJournal(ActionJournal):
    """Keeps entries in a list; handy for tests and local tooling."""

    def __init__(self) -> None:
        self.entries: List[Dict[str, Any]] = []

    def record(self, action_type: str, payload: Optional[Dict[str, Any]] = None, *, reason: str | None = None) -> None:
        self.entries.append({"action_type": action_type, "payload": dict(payload or {}), "reason": reason})

    def types(self) -> List[str]:
        return [entry["action_type"] for entry in self.entries]


class SqlActionJournal(ActionJournal):
    def __init__(self, db: Session, user_id: UUID) -> None:
        self.db = db
        self.user_id = user_id

    def record(self, action_type: str, payload: Optional[Dict[str, Any]] = None, *, reason: str | None = None) -> None:
        body = {"user_id": str(self.user_id), "request_id": get_request_id() or "", **(payload or {})}
        try:
            get_or_create_user(self.db, self.user_id)
            self.db.add(
                ActionLog(
                    user_id=self.user_id,
                    action_type=action_type,
                    action_payload=body,
                    reason=reason,
                )
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
