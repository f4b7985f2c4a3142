"""Per-user guard rejecting overlapping actions on the same resource."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from threading import Lock
from typing import Iterator, Set, Tuple

logger = logging.getLogger(__name__)

LIBRARY = "library"
PROFILE = "profile"
PLAN = "plan"
TASKS = "tasks"
SPEECH = "speech"
CHECK_IN = "check_in"
SUMMARY = "summary"


class ActionInProgress(Exception):
    def __init__(self, user_id: str, resource: str) -> None:
        super().__init__(f"Another {resource} action is already running")
        self.user_id = user_id
        self.resource = resource


class ActionGuard:
    def __init__(self) -> None:
        self._lock = Lock()
        self._held: Set[Tuple[str, str]] = set()

    @contextmanager
    def hold(self, user_id: str, *resources: str) -> Iterator[None]:
        """Claim every resource for the user or none of them; raises ActionInProgress when busy."""
        keys = [(str(user_id), resource) for resource in resources]
        with self._lock:
            for key in keys:
                if key in self._held:
                    logger.warning("Rejected overlapping %s action for user %s", key[1], key[0])
                    raise ActionInProgress(key[0], key[1])
            self._held.update(keys)
        try:
            yield
        finally:
            with self._lock:
                self._held.difference_update(keys)

    def is_busy(self, user_id: str, resource: str) -> bool:
        with self._lock:
            return (str(user_id), resource) in self._held


action_guard = ActionGuard()
