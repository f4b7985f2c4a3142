"""Multi-step companion flows and their partial-failure rules."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from companion.core.context import action_scope
from companion.domain.entities import (
    ActionTask,
    ExperienceEntry,
    GrowthPlan,
    GuidedQuestion,
    OnboardingAnswers,
    VirtualSelfProfile,
    WeeklySummary,
)
from companion.observability.metrics import log_metric
from companion.observability.tracing import annotate, trace
from companion.services import journal as journal_events
from companion.services.ai.errors import PipelineFailure
from companion.services.ai.gateway import DEFAULT_COMPANION_LINE, AIGateway
from companion.services.guided_questions import QA_TAG, get_question, next_question
from companion.services.journal import ActionJournal, NullJournal
from companion.services.storage.state import CompanionState
from companion.services.tasks import tasks_from_plan, toggle_completion

logger = logging.getLogger(__name__)

MIN_ENTRIES_FOR_PLAN = 3
MIN_ENTRIES_FOR_SUMMARY = 1


class OrchestrationError(Exception):
    """A user action was rejected before any remote call was made."""


class ProfileMissing(OrchestrationError):
    def __init__(self) -> None:
        super().__init__("Complete onboarding before using this feature")


class EntryNotFound(OrchestrationError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(f"Experience entry {entry_id} not found")
        self.entry_id = entry_id


class TaskNotFound(OrchestrationError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class UnknownQuestion(OrchestrationError):
    def __init__(self, question_id: str) -> None:
        super().__init__(f"Guided question {question_id} does not exist")
        self.question_id = question_id


class InsufficientExperiences(OrchestrationError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(f"At least {required} experiences are needed, found {available}")
        self.required = required
        self.available = available


@dataclass
class OnboardingOutcome:
    profile: VirtualSelfProfile
    entries: List[ExperienceEntry]
    avatar_degraded: bool = False


@dataclass
class IngestOutcome:
    entries: List[ExperienceEntry]
    profile: VirtualSelfProfile
    companion_line: str


@dataclass
class PlanOutcome:
    plan: GrowthPlan
    tasks: List[ActionTask]


@dataclass
class CheckInOutcome:
    feedback: str
    audio: Optional[str] = None
    degraded: List[str] = field(default_factory=list)


class ProfileOrchestrator:
    """Runs one user action end to end against the gateway and the persisted state."""

    def __init__(
        self,
        gateway: AIGateway,
        state: CompanionState,
        journal: Optional[ActionJournal] = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.gateway = gateway
        self.state = state
        self.journal = journal or NullJournal()
        self.today = today

    # ------------------------------------------------------------------
    # Onboarding
    # ------------------------------------------------------------------

    def complete_onboarding(self, answers: OnboardingAnswers) -> OnboardingOutcome:
        """
        Draft a profile from the onboarding answers and persist it as initialized.

        A failure while drafting propagates and leaves storage untouched. The avatar is an
        enhancement: when it cannot be drawn the profile is saved without one.
        """
        with action_scope("onboarding"), trace("orchestrator.onboarding", metadata={"gender": answers.gender.value}) as span:
            draft = self.gateway.initialize_profile(answers)

            avatar_url: Optional[str] = None
            degraded = False
            if draft.profile.ootd:
                try:
                    avatar_url = self.gateway.generate_avatar(draft.profile.ootd, draft.profile.gender)
                except PipelineFailure as exc:
                    degraded = True
                    self._avatar_degraded("onboarding", exc)
            else:
                logger.info("Drafted profile has no outfit description; skipping avatar")

            profile = draft.profile.model_copy(update={"avatar_url": avatar_url, "initialized": True})
            self.state.save(library=draft.entries, profile=profile)

            self.journal.record(
                journal_events.ONBOARDING_COMPLETED,
                {"entry_count": len(draft.entries), "avatar": avatar_url is not None},
                reason="Onboarding completed",
            )
            annotate(span, entry_count=len(draft.entries), avatar_degraded=degraded)
        log_metric("orchestrator.onboarding.success", 1, {"avatar_degraded": degraded})
        return OnboardingOutcome(profile=profile, entries=draft.entries, avatar_degraded=degraded)

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------

    def ingest_raw_input(self, text: str) -> IngestOutcome:
        """
        Turn free text into entries, then refresh the profile from the whole library.

        New entries are persisted before the profile update runs so captured text is
        never lost. If the update fails the prior profile stays in place and the failure
        propagates.
        """
        with action_scope("ingest_raw_input"), trace("orchestrator.ingest_raw_input") as span:
            previous = self._require_profile()
            drafts = self.gateway.process_raw_input(text)
            new_entries = [
                ExperienceEntry(content=draft.content, category=draft.category, tags=draft.tags)
                for draft in drafts
            ]
            library = new_entries + self.state.library()
            self.state.save(library=library)
            self.journal.record(
                journal_events.ENTRIES_INGESTED,
                {"entry_ids": [entry.id for entry in new_entries], "library_size": len(library)},
            )

            try:
                updated = self.gateway.update_profile(library, previous.gender)
            except PipelineFailure as exc:
                logger.warning("Profile update failed after ingesting %d entries; keeping prior profile", len(new_entries))
                self.journal.record(
                    journal_events.PROFILE_UPDATE_FAILED,
                    {"kind": exc.kind.value, "entry_ids": [entry.id for entry in new_entries]},
                    reason=exc.message,
                )
                raise

            profile = updated.model_copy(update={"avatar_url": previous.avatar_url, "ootd": previous.ootd})
            line = self._companion_line("The user recorded a new experience.", profile)
            self.state.save(library=library, profile=profile)
            annotate(span, new_entries=len(new_entries), library_size=len(library))
        log_metric("orchestrator.ingest.entries", len(new_entries))
        return IngestOutcome(entries=new_entries, profile=profile, companion_line=line)

    def answer_guided_question(self, question_id: str, answer: str) -> ExperienceEntry:
        question = get_question(question_id)
        if question is None:
            raise UnknownQuestion(question_id)
        entry = ExperienceEntry(content=answer.strip(), category=question.category, tags=[QA_TAG])
        self.state.save(library=[entry] + self.state.library())
        return entry

    def next_guided_question(self) -> GuidedQuestion:
        return next_question(self.state.library())

    def delete_entry(self, entry_id: str) -> List[ExperienceEntry]:
        library = self.state.library()
        remaining = [entry for entry in library if entry.id != entry_id]
        if len(remaining) == len(library):
            raise EntryNotFound(entry_id)
        self.state.save(library=remaining)
        return remaining

    # ------------------------------------------------------------------
    # Profile media
    # ------------------------------------------------------------------

    def regenerate_avatar(self, ootd: Optional[str] = None) -> VirtualSelfProfile:
        """Redraw the avatar; unlike onboarding, a failure here is reported to the caller."""
        with action_scope("regenerate_avatar"):
            profile = self._require_profile()
            outfit = (ootd or profile.ootd or "").strip()
            if not outfit:
                raise OrchestrationError("No outfit description available to draw the avatar")
            avatar_url = self.gateway.generate_avatar(outfit, profile.gender)
            updated = profile.model_copy(update={"avatar_url": avatar_url, "ootd": outfit})
            self.state.save(profile=updated)
        return updated

    def speak(self, text: str) -> str:
        profile = self._require_profile()
        with action_scope("speak"):
            return self.gateway.generate_speech(text, profile.gender)

    # ------------------------------------------------------------------
    # Plan and tasks
    # ------------------------------------------------------------------

    def generate_plan(self) -> PlanOutcome:
        """Generate a growth plan and replace the task list with tasks derived from it."""
        with action_scope("generate_plan"), trace("orchestrator.generate_plan") as span:
            profile = self._require_profile()
            library = self.state.library()
            if len(library) < MIN_ENTRIES_FOR_PLAN:
                raise InsufficientExperiences(MIN_ENTRIES_FOR_PLAN, len(library))

            plan = self.gateway.generate_growth_plan(profile, library)
            tasks = tasks_from_plan(plan)
            self.state.save(tasks=tasks, plan=plan)
            self.journal.record(
                journal_events.PLAN_GENERATED,
                {"task_ids": [task.id for task in tasks], "direction_count": len(plan.directions)},
            )
            annotate(span, task_count=len(tasks))
        log_metric("orchestrator.plan.tasks", len(tasks))
        return PlanOutcome(plan=plan, tasks=tasks)

    def toggle_task(self, task_id: str) -> ActionTask:
        tasks = self.state.tasks()
        for idx, task in enumerate(tasks):
            if task.id == task_id:
                toggled = toggle_completion(task, self.today())
                tasks[idx] = toggled
                self.state.save(tasks=tasks)
                self.journal.record(
                    journal_events.TASK_TOGGLED,
                    {"task_id": task_id, "completed_today": len(toggled.completed_dates) > len(task.completed_dates)},
                )
                return toggled
        raise TaskNotFound(task_id)

    def check_in(self, *, with_audio: bool = False) -> CheckInOutcome:
        """Ask for feedback on task progress; the spoken version is optional and best effort."""
        with action_scope("check_in"):
            profile = self._require_profile()
            feedback = self.gateway.get_check_in_feedback(self.state.tasks(), profile)
            outcome = CheckInOutcome(feedback=feedback)
            if with_audio:
                try:
                    outcome.audio = self.gateway.generate_speech(feedback, profile.gender)
                except PipelineFailure as exc:
                    logger.warning("Check-in audio unavailable (%s)", exc.kind.value)
                    outcome.degraded.append("audio")
        return outcome

    def weekly_summary(self) -> WeeklySummary:
        library = self.state.library()
        if len(library) < MIN_ENTRIES_FOR_SUMMARY:
            raise InsufficientExperiences(MIN_ENTRIES_FOR_SUMMARY, len(library))
        with action_scope("weekly_summary"):
            return self.gateway.generate_weekly_summary(library)

    def reset(self) -> None:
        self.state.clear()
        logger.info("Cleared companion state")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_profile(self) -> VirtualSelfProfile:
        profile = self.state.profile()
        if profile is None:
            raise ProfileMissing()
        return profile

    def _companion_line(self, context: str, profile: VirtualSelfProfile) -> str:
        try:
            return self.gateway.get_companion_speech(context, profile)
        except PipelineFailure as exc:
            logger.warning("Companion speech unavailable (%s); using default line", exc.kind.value)
            return DEFAULT_COMPANION_LINE

    def _avatar_degraded(self, flow: str, exc: PipelineFailure) -> None:
        logger.warning("Avatar generation failed during %s (%s); continuing without avatar", flow, exc.kind.value)
        log_metric("orchestrator.avatar.degraded", 1, {"flow": flow, "kind": exc.kind.value})
        self.journal.record(
            journal_events.AVATAR_DEGRADED,
            {"flow": flow, "kind": exc.kind.value},
            reason=exc.message,
        )
