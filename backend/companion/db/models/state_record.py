"""Key-value state record ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB, UUID

from companion.db.base import Base


class StateRecord(Base):
    """One whole JSON document per (user, record key): library, profile, tasks or plan."""

    __tablename__ = "state_records"
    __table_args__ = (UniqueConstraint("user_id", "record_key", name="uq_state_records_user_key"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    record_key = Column(String(64), nullable=False)
    payload = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
