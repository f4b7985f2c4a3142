"""Helpers for working with users."""
from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from companion.db.models.user import User


def get_or_create_user(db: Session, user_id: UUID) -> User:
    """Fetch an existing user or create the row, tolerating a concurrent insert."""
    user = db.get(User, user_id)
    if user:
        return user

    user = User(id=user_id)
    db.add(user)
    try:
        db.flush()
        return user
    except IntegrityError:
        db.rollback()
        existing = db.get(User, user_id)
        if existing:
            return existing
        raise


def mark_onboarded(db: Session, user_id: UUID) -> User:
    user = get_or_create_user(db, user_id)
    user.onboarded_at = datetime.now(timezone.utc)
    db.add(user)
    db.commit()
    return user
