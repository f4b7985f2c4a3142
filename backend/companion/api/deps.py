"""FastAPI dependencies wiring requests to the orchestrator."""
from __future__ import annotations

from uuid import UUID

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from companion.db.session import get_db
from companion.services.ai.factory import get_ai_gateway
from companion.services.ai.gateway import AIGateway
from companion.services.busy import ActionGuard, action_guard
from companion.services.journal import SqlActionJournal
from companion.services.orchestrator import ProfileOrchestrator
from companion.services.storage.sql import SqlKeyValueStore
from companion.services.storage.state import CompanionState


def get_gateway() -> AIGateway:
    return get_ai_gateway()


def get_action_guard() -> ActionGuard:
    return action_guard


def get_orchestrator(
    user_id: UUID = Query(..., description="User owning the companion state"),
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_gateway),
) -> ProfileOrchestrator:
    state = CompanionState(SqlKeyValueStore(db, user_id))
    return ProfileOrchestrator(gateway, state, SqlActionJournal(db, user_id))
