"""Typed AI operations composed from retries, response repair and category normalization."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from companion.domain.entities import (
    ActionTask,
    ExperienceEntry,
    Gender,
    GrowthPlan,
    OnboardingAnswers,
    VirtualSelfProfile,
    WeeklySummary,
    now_ms,
)
from companion.observability.metrics import log_metric, timed
from companion.observability.tracing import annotate, trace
from companion.services.ai import prompts
from companion.services.ai.categories import normalize_category
from companion.services.ai.client import GenerativeClient
from companion.services.ai.errors import EmptyResponse, MalformedResponse, PipelineFailure
from companion.services.ai.response_repair import parse_model_json, parse_model_output, validate_payload
from companion.services.ai.retry import RetryPolicy
from companion.services.ai.schemas import (
    EntryDraft,
    OnboardingReply,
    ProfileDraft,
    RawInputReply,
    WeeklySummaryReply,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

DEFAULT_COMPANION_LINE = "I'm listening."
DEFAULT_CHECK_IN_LINE = "Nice work, keep it up!"
WEEK_MS = 7 * 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class ModelConfig:
    text_model: str
    deep_model: str
    image_model: str
    speech_model: str
    voice_male: str
    voice_default: str
    library_context_limit: int = 10


@dataclass
class OnboardingDraft:
    profile: VirtualSelfProfile
    entries: List[ExperienceEntry]


def voice_for(gender: Gender, models: ModelConfig) -> str:
    return models.voice_male if gender == Gender.MALE else models.voice_default


class AIGateway:
    """One method per AI-backed capability. Every failure surfaces as PipelineFailure."""

    def __init__(self, client: GenerativeClient, retry_policy: RetryPolicy, models: ModelConfig) -> None:
        self.client = client
        self.retry_policy = retry_policy
        self.models = models

    # ------------------------------------------------------------------
    # Structured operations
    # ------------------------------------------------------------------

    def initialize_profile(self, answers: OnboardingAnswers) -> OnboardingDraft:
        reply = self._structured(
            "initialize_profile",
            shape=OnboardingReply,
            model=self.models.text_model,
            system_instruction=prompts.onboarding_instruction(OnboardingReply),
            contents=answers.model_dump_json(),
        )
        profile = VirtualSelfProfile(
            **reply.profile.model_dump(),
            gender=answers.gender,
            initialized=False,
        )
        entries = [
            ExperienceEntry(content=raw.content, category=normalize_category(raw.category), tags=raw.tags)
            for raw in reply.entries
        ]
        return OnboardingDraft(profile=profile, entries=entries)

    def update_profile(self, library: Sequence[ExperienceEntry], gender: Gender) -> VirtualSelfProfile:
        recent = list(library[: self.models.library_context_limit])
        draft = self._structured(
            "update_profile",
            shape=ProfileDraft,
            model=self.models.text_model,
            system_instruction=prompts.profile_update_instruction(ProfileDraft),
            contents=f"Experiences: {_dump_entries(recent)}",
            metadata={"entries_sent": len(recent), "library_size": len(library)},
        )
        return VirtualSelfProfile(**draft.model_dump(), gender=gender, initialized=True)

    def process_raw_input(self, text: str) -> List[EntryDraft]:
        reply = self._structured(
            "process_raw_input",
            shape=RawInputReply,
            model=self.models.text_model,
            system_instruction=prompts.raw_input_instruction(RawInputReply),
            contents=text,
            decode=_decode_entry_list,
        )
        return [
            EntryDraft(content=raw.content, category=normalize_category(raw.category), tags=raw.tags)
            for raw in reply.entries
        ]

    def generate_growth_plan(self, profile: VirtualSelfProfile, library: Sequence[ExperienceEntry]) -> GrowthPlan:
        contents = (
            f"Profile: {profile.model_dump_json(exclude={'avatar_url'})}\n"
            f"Experiences: {_dump_entries(library)}"
        )
        return self._structured(
            "generate_growth_plan",
            shape=GrowthPlan,
            model=self.models.deep_model,
            system_instruction=prompts.growth_plan_instruction(GrowthPlan),
            contents=contents,
            metadata={"library_size": len(library)},
        )

    def generate_weekly_summary(self, library: Sequence[ExperienceEntry]) -> WeeklySummary:
        generated_at = now_ms()
        this_week = [entry for entry in library if generated_at - entry.timestamp <= WEEK_MS]
        selection = this_week or list(library[: self.models.library_context_limit])
        reply = self._structured(
            "generate_weekly_summary",
            shape=WeeklySummaryReply,
            model=self.models.text_model,
            system_instruction=prompts.weekly_summary_instruction(WeeklySummaryReply),
            contents=f"Experiences: {_dump_entries(selection)}",
            metadata={"entries_sent": len(selection)},
        )
        return WeeklySummary(**reply.model_dump(), generated_at=generated_at)

    # ------------------------------------------------------------------
    # Prose and media operations
    # ------------------------------------------------------------------

    def get_companion_speech(self, context: str, profile: VirtualSelfProfile) -> str:
        text = self._invoke(
            "get_companion_speech",
            lambda: self.client.generate_text(
                model=self.models.text_model,
                contents=context,
                system_instruction=prompts.companion_instruction(profile.summary),
            ),
        )
        return text if text.strip() else DEFAULT_COMPANION_LINE

    def get_check_in_feedback(self, tasks: Sequence[ActionTask], profile: VirtualSelfProfile) -> str:
        lines = [
            f"- {task.title} ({task.frequency.value}): completed {len(task.completed_dates)} time(s), "
            f"last on {task.last_completed or 'never'}"
            for task in tasks
        ]
        contents = "Give feedback on my task check-in.\n" + ("\n".join(lines) or "No tasks yet.")
        text = self._invoke(
            "get_check_in_feedback",
            lambda: self.client.generate_text(
                model=self.models.text_model,
                contents=contents,
                system_instruction=prompts.companion_instruction(profile.summary),
            ),
            metadata={"task_count": len(tasks)},
        )
        return text if text.strip() else DEFAULT_CHECK_IN_LINE

    def generate_avatar(self, ootd: str, gender: Gender) -> str:
        def _attempt() -> str:
            image_b64 = self.client.generate_image(
                model=self.models.image_model,
                prompt=prompts.avatar_prompt(ootd, gender),
            )
            if not image_b64:
                raise EmptyResponse("Image model returned no image data")
            return image_b64

        image_b64 = self._invoke("generate_avatar", _attempt)
        return f"data:image/png;base64,{image_b64}"

    def generate_speech(self, text: str, gender: Gender) -> str:
        voice = voice_for(gender, self.models)

        def _attempt() -> str:
            audio = self.client.synthesize_speech(model=self.models.speech_model, text=text, voice=voice)
            if not audio:
                raise EmptyResponse("Speech model returned no audio")
            return audio

        return self._invoke("generate_speech", _attempt, metadata={"voice": voice, "text_length": len(text)})

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _structured(
        self,
        operation: str,
        *,
        shape: Type[M],
        model: str,
        system_instruction: str,
        contents: str,
        metadata: Optional[Dict[str, Any]] = None,
        decode: Optional[Callable[[str, Type[M]], M]] = None,
    ) -> M:
        def _call() -> M:
            text = self.retry_policy.run(
                lambda: self.client.generate_text(
                    model=model,
                    contents=contents,
                    system_instruction=system_instruction,
                    json_output=True,
                ),
                operation=operation,
            )
            return (decode or parse_model_output)(text, shape)

        return self._guarded(operation, _call, {"model": model, **(metadata or {})})

    def _invoke(self, operation: str, attempt: Callable[[], T], metadata: Optional[Dict[str, Any]] = None) -> T:
        return self._guarded(
            operation,
            lambda: self.retry_policy.run(attempt, operation=operation),
            metadata or {},
        )

    def _guarded(self, operation: str, call: Callable[[], T], metadata: Dict[str, Any]) -> T:
        with trace(f"ai.{operation}", metadata=metadata) as span, timed(f"ai.{operation}"):
            try:
                result = call()
            except Exception as exc:
                failure = PipelineFailure.from_exception(operation, exc)
                logger.error("AI operation %s failed (%s): %s", operation, failure.kind.value, exc)
                if isinstance(exc, MalformedResponse):
                    logger.debug("Raw reply for %s: %s", operation, exc.raw_text[:2000])
                log_metric("ai.failure", 1, {"operation": operation, "kind": failure.kind.value})
                annotate(span, outcome="failure", kind=failure.kind.value)
                raise failure from exc
            annotate(span, outcome="success")
        log_metric("ai.success", 1, {"operation": operation})
        return result


def _dump_entries(entries: Sequence[ExperienceEntry]) -> str:
    return json.dumps(
        [entry.model_dump(mode="json", exclude={"id"}) for entry in entries],
        ensure_ascii=False,
    )


def _decode_entry_list(text: str, shape: Type[RawInputReply]) -> RawInputReply:
    """Accept either a bare JSON array of entries or an object wrapping them."""
    payload = parse_model_json(text)
    if isinstance(payload, list):
        payload = {"entries": payload}
    elif isinstance(payload, dict) and len(payload) == 1 and "entries" not in payload:
        (only_value,) = payload.values()
        if isinstance(only_value, list):
            payload = {"entries": only_value}
    return validate_payload(payload, shape, raw_text=text)
