"""Typed access to the four persisted aggregates: library, profile, tasks and plan."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from companion.domain.entities import ActionTask, ExperienceEntry, GrowthPlan, VirtualSelfProfile
from companion.services.storage.base import KeyValueStore

LIBRARY_KEY = "library"
PROFILE_KEY = "profile"
TASKS_KEY = "tasks"
PLAN_KEY = "plan"

_UNSET: Any = object()


class CompanionState:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def library(self) -> List[ExperienceEntry]:
        return [ExperienceEntry.model_validate(item) for item in self.store.get(LIBRARY_KEY) or []]

    def profile(self) -> Optional[VirtualSelfProfile]:
        data = self.store.get(PROFILE_KEY)
        return VirtualSelfProfile.model_validate(data) if data else None

    def tasks(self) -> List[ActionTask]:
        return [ActionTask.model_validate(item) for item in self.store.get(TASKS_KEY) or []]

    def plan(self) -> Optional[GrowthPlan]:
        data = self.store.get(PLAN_KEY)
        return GrowthPlan.model_validate(data) if data else None

    def save(
        self,
        *,
        library: List[ExperienceEntry] = _UNSET,
        profile: Optional[VirtualSelfProfile] = _UNSET,
        tasks: List[ActionTask] = _UNSET,
        plan: Optional[GrowthPlan] = _UNSET,
    ) -> None:
        """Write the given aggregates together as whole-record replacements."""
        records: Dict[str, Any] = {}
        if library is not _UNSET:
            records[LIBRARY_KEY] = [entry.model_dump(mode="json") for entry in library]
        if profile is not _UNSET:
            records[PROFILE_KEY] = profile.model_dump(mode="json") if profile else None
        if tasks is not _UNSET:
            records[TASKS_KEY] = [task.model_dump(mode="json") for task in tasks]
        if plan is not _UNSET:
            records[PLAN_KEY] = plan.model_dump(mode="json") if plan else None
        self.store.set_many(records)

    def clear(self) -> None:
        self.store.clear()
