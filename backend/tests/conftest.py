from __future__ import annotations

from typing import Any, Dict, List

import pytest

from companion.domain.entities import (
    ExperienceCategory,
    ExperienceEntry,
    GrowthDirection,
    GrowthPlan,
    SuggestedTask,
    TaskFrequency,
    VirtualSelfProfile,
    WeeklySummary,
    now_ms,
)
from companion.services.ai.errors import FailureKind, PipelineFailure
from companion.services.ai.gateway import OnboardingDraft
from companion.services.ai.schemas import EntryDraft
from companion.services.journal import MemoryJournal
from companion.services.orchestrator import ProfileOrchestrator
from companion.services.storage.memory import InMemoryKeyValueStore
from companion.services.storage.state import CompanionState


class FakeGateway:
    """Stands in for AIGateway; set ``failures[operation]`` to make an operation fail."""

    def __init__(self) -> None:
        self.calls: List[tuple[str, Dict[str, Any]]] = []
        self.failures: Dict[str, BaseException] = {}
        self.raw_drafts = [
            EntryDraft(content="Shipped the search feature", category=ExperienceCategory.ACHIEVEMENT, tags=["work"]),
            EntryDraft(content="Worried about the reorg", category=ExperienceCategory.ANXIETY, tags=[]),
        ]
        self.onboarding_ootd: str | None = "denim jacket and white sneakers"

    def fail(self, operation: str, kind: FailureKind = FailureKind.UNKNOWN) -> None:
        self.failures[operation] = PipelineFailure(kind, operation)

    def _enter(self, operation: str, **kwargs: Any) -> None:
        self.calls.append((operation, kwargs))
        if operation in self.failures:
            raise self.failures[operation]

    def called(self, operation: str) -> List[Dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    def initialize_profile(self, answers):
        self._enter("initialize_profile", answers=answers)
        profile = VirtualSelfProfile(
            gender=answers.gender,
            core_values=["honesty"],
            summary="drafted",
            affinity=40,
            ootd=self.onboarding_ootd,
        )
        entries = [
            ExperienceEntry(content="Grew up by the sea", category=ExperienceCategory.PERSONAL),
            ExperienceEntry(content="Want to build a studio", category=ExperienceCategory.VISION),
        ]
        return OnboardingDraft(profile=profile, entries=entries)

    def generate_avatar(self, ootd, gender):
        self._enter("generate_avatar", ootd=ootd, gender=gender)
        return "data:image/png;base64,QVZBVEFS"

    def update_profile(self, library, gender):
        self._enter("update_profile", library=list(library), gender=gender)
        return VirtualSelfProfile(
            gender=gender,
            core_values=["growth"],
            summary="updated",
            affinity=60,
            ootd="model suggested outfit",
            initialized=True,
        )

    def process_raw_input(self, text):
        self._enter("process_raw_input", text=text)
        return list(self.raw_drafts)

    def generate_growth_plan(self, profile, library):
        self._enter("generate_growth_plan", profile=profile, library=list(library))
        return GrowthPlan(
            core_values_analysis="Values craft",
            directions=[GrowthDirection(title="Indie maker", reasoning="Likes building", fit="High")],
            short_term=["Ship a side project"],
            mid_term=["Launch a studio"],
            action_guide="Start small.",
            suggested_tasks=[
                SuggestedTask(title="Write 200 words", frequency=TaskFrequency.DAILY),
                SuggestedTask(title="Weekly review", frequency=TaskFrequency.WEEKLY),
            ],
        )

    def get_companion_speech(self, context, profile):
        self._enter("get_companion_speech", context=context, profile=profile)
        return "Nice, I saved that."

    def get_check_in_feedback(self, tasks, profile):
        self._enter("get_check_in_feedback", tasks=list(tasks), profile=profile)
        return "Steady progress."

    def generate_speech(self, text, gender):
        self._enter("generate_speech", text=text, gender=gender)
        return "UENNQVVESU8="

    def generate_weekly_summary(self, library):
        self._enter("generate_weekly_summary", library=list(library))
        return WeeklySummary(
            period="This week",
            summary="A busy week.",
            value_shifts="More focus on craft.",
            top_insights=["You enjoy shipping"],
            generated_at=now_ms(),
        )


@pytest.fixture()
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def memory_state() -> CompanionState:
    return CompanionState(InMemoryKeyValueStore())


@pytest.fixture()
def journal() -> MemoryJournal:
    return MemoryJournal()


@pytest.fixture()
def orchestrator(fake_gateway, memory_state, journal) -> ProfileOrchestrator:
    return ProfileOrchestrator(fake_gateway, memory_state, journal)
