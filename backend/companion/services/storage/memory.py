"""In-process key-value store used by tests and local tooling."""
from __future__ import annotations

import copy
from threading import Lock
from typing import Any, Dict, Mapping, Optional

from companion.services.storage.base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(dict(initial or {}))
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set_many(self, records: Mapping[str, Any]) -> None:
        snapshot = copy.deepcopy(dict(records))
        with self._lock:
            self._data.update(snapshot)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
