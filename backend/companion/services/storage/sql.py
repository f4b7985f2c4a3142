"""SQLAlchemy-backed key-value store scoped to one user."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from companion.db.models.state_record import StateRecord
from companion.services.storage.base import KeyValueStore
from companion.services.users import get_or_create_user

logger = logging.getLogger(__name__)


class SqlKeyValueStore(KeyValueStore):
    def __init__(self, db: Session, user_id: UUID) -> None:
        self.db = db
        self.user_id = user_id

    def _record(self, key: str) -> Optional[StateRecord]:
        return (
            self.db.query(StateRecord)
            .filter(StateRecord.user_id == self.user_id, StateRecord.record_key == key)
            .one_or_none()
        )

    def get(self, key: str) -> Optional[Any]:
        record = self._record(key)
        return record.payload if record else None

    def set_many(self, records: Mapping[str, Any]) -> None:
        if not records:
            return
        try:
            get_or_create_user(self.db, self.user_id)
            for key, value in records.items():
                record = self._record(key)
                if record is None:
                    record = StateRecord(user_id=self.user_id, record_key=key)
                record.payload = value
                self.db.add(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.debug("Persisted records %s for user %s", sorted(records), self.user_id)

    def clear(self) -> None:
        try:
            self.db.query(StateRecord).filter(StateRecord.user_id == self.user_id).delete()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
