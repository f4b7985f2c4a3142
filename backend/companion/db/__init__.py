"""Database utilities and models."""

from companion.db.base import Base
from companion.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
