"""Key-value store interface for persisted companion state."""
from __future__ import annotations

from typing import Any, Mapping, Optional


class KeyValueStore:
    """Synchronous durable store of whole JSON documents addressed by key."""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def set_many(self, records: Mapping[str, Any]) -> None:
        """Replace several records at once; either all writes land or none do."""
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError
