"""ORM models exposed for metadata discovery."""
from companion.db.models.action_log import ActionLog
from companion.db.models.state_record import StateRecord
from companion.db.models.user import User

__all__ = [
    "ActionLog",
    "StateRecord",
    "User",
]
