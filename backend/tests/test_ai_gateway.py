"""Tests for the AI gateway against a scripted generative client."""
from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

from companion.domain.entities import (
    ActionTask,
    ExperienceCategory,
    ExperienceEntry,
    Gender,
    OnboardingAnswers,
    TaskFrequency,
    VirtualSelfProfile,
    now_ms,
)
from companion.services.ai.errors import FailureKind, MalformedResponse, PipelineFailure
from companion.services.ai.gateway import (
    DEFAULT_CHECK_IN_LINE,
    DEFAULT_COMPANION_LINE,
    AIGateway,
    ModelConfig,
)
from companion.services.ai.retry import RetryPolicy

MODELS = ModelConfig(
    text_model="fast-model",
    deep_model="deep-model",
    image_model="image-model",
    speech_model="speech-model",
    voice_male="onyx",
    voice_default="nova",
    library_context_limit=10,
)


class _RateLimitError(Exception):
    status_code = 429


class _ScriptedClient:
    """Returns (or raises) queued replies and records every request."""

    def __init__(self, *replies: Any, images: List[Any] | None = None, audio: List[Any] | None = None):
        self.replies = list(replies)
        self.images = list(images or [])
        self.audio = list(audio or [])
        self.text_requests: List[Dict[str, Any]] = []
        self.image_requests: List[Dict[str, Any]] = []
        self.speech_requests: List[Dict[str, Any]] = []

    @staticmethod
    def _next(queue: List[Any]) -> Any:
        item = queue.pop(0) if queue else ""
        if isinstance(item, BaseException):
            raise item
        return item

    def generate_text(self, **kwargs: Any) -> str:
        self.text_requests.append(kwargs)
        return self._next(self.replies)

    def generate_image(self, **kwargs: Any):
        self.image_requests.append(kwargs)
        return self._next(self.images) or None

    def synthesize_speech(self, **kwargs: Any) -> str:
        self.speech_requests.append(kwargs)
        return self._next(self.audio)


def _gateway(client: _ScriptedClient, sleeps: list | None = None) -> AIGateway:
    sleeps = sleeps if sleeps is not None else []
    return AIGateway(client, RetryPolicy(sleep=sleeps.append), MODELS)


def _answers(gender: Gender = Gender.FEMALE) -> OnboardingAnswers:
    return OnboardingAnswers(
        gender=gender,
        basic_info="28, product designer in Lisbon",
        satisfactions="Shipped a redesign people love",
        anxieties="Not sure design is my long-term path",
        vision="Run a small studio",
        anti_life="Endless meetings",
    )


def _profile_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "core_values": ["craft"],
        "strengths": ["empathy"],
        "shortcomings": ["overthinking"],
        "growth_suggestions": ["ship smaller"],
        "joy_triggers": ["sketching"],
        "interest_directions": ["typography"],
        "summary": "A thoughtful maker.",
        "mood": "hopeful",
        "affinity": 55,
        "ootd": "linen shirt, round glasses",
    }
    payload.update(overrides)
    return payload


def _entries(count: int) -> List[ExperienceEntry]:
    return [ExperienceEntry(content=f"entry-{idx}", category=ExperienceCategory.JOY) for idx in range(count)]


def test_initialize_profile_normalizes_reply() -> None:
    reply = {
        "profile": _profile_payload(affinity=140, gender="MALE"),
        "entries": [
            {"content": "Shipped a redesign", "category": "career achievement", "tags": ["work"]},
            {"content": "Sunday sketching", "category": "joy"},
            {"content": "Thinking about a studio", "category": None},
        ],
    }
    client = _ScriptedClient("Here you go:\n```json\n" + json.dumps(reply) + "\n```")

    draft = _gateway(client).initialize_profile(_answers(Gender.FEMALE))

    assert draft.profile.gender is Gender.FEMALE
    assert draft.profile.initialized is False
    assert draft.profile.affinity == 100
    assert draft.profile.avatar_url is None
    assert [entry.category for entry in draft.entries] == [
        ExperienceCategory.CAREER,
        ExperienceCategory.JOY,
        ExperienceCategory.PERSONAL,
    ]
    assert len({entry.id for entry in draft.entries}) == 3
    assert client.text_requests[0]["json_output"] is True
    assert client.text_requests[0]["model"] == "fast-model"


def test_initialize_profile_missing_fields_is_data_format_failure_without_retry() -> None:
    sleeps: list = []
    client = _ScriptedClient(json.dumps({"profile": {"summary": "only this"}, "entries": []}))

    with pytest.raises(PipelineFailure) as exc_info:
        _gateway(client, sleeps).initialize_profile(_answers())

    assert exc_info.value.kind is FailureKind.DATA_FORMAT
    assert exc_info.value.message == "Data parsing failed, please retry."
    assert isinstance(exc_info.value.cause, MalformedResponse)
    assert len(client.text_requests) == 1
    assert sleeps == []


def test_empty_reply_is_data_format_failure() -> None:
    with pytest.raises(PipelineFailure) as exc_info:
        _gateway(_ScriptedClient("")).update_profile(_entries(1), Gender.MALE)

    assert exc_info.value.kind is FailureKind.DATA_FORMAT


def test_update_profile_sends_only_recent_entries_and_reasserts_gender() -> None:
    client = _ScriptedClient(json.dumps(_profile_payload()))
    library = _entries(15)

    profile = _gateway(client).update_profile(library, Gender.NON_BINARY)

    sent = client.text_requests[0]["contents"]
    assert "entry-9" in sent
    assert "entry-10" not in sent
    assert profile.gender is Gender.NON_BINARY
    assert profile.initialized is True
    assert profile.avatar_url is None


def test_process_raw_input_accepts_bare_list() -> None:
    client = _ScriptedClient('[{"content": "Ran 5k", "category": "Achievement"}, {"content": "Bought a plant"}]')

    drafts = _gateway(client).process_raw_input("Ran 5k and bought a plant")

    assert [draft.content for draft in drafts] == ["Ran 5k", "Bought a plant"]
    assert [draft.category for draft in drafts] == [ExperienceCategory.ACHIEVEMENT, ExperienceCategory.PERSONAL]


def test_process_raw_input_accepts_wrapped_list() -> None:
    client = _ScriptedClient('{"items": [{"content": "Missed the bus", "category": "choice regret", "tags": ["commute"]}]}')

    drafts = _gateway(client).process_raw_input("Missed the bus")

    assert drafts[0].category is ExperienceCategory.CHOICE_REGRET
    assert drafts[0].tags == ["commute"]


def test_rate_limit_exhaustion_maps_to_quota_failure() -> None:
    sleeps: list = []
    client = _ScriptedClient(*[_RateLimitError("429 Too Many Requests") for _ in range(4)])

    with pytest.raises(PipelineFailure) as exc_info:
        _gateway(client, sleeps).process_raw_input("hello")

    assert exc_info.value.kind is FailureKind.QUOTA
    assert sleeps == [2.0, 4.0, 8.0]
    assert len(client.text_requests) == 4


def test_growth_plan_uses_deep_model() -> None:
    plan = {
        "core_values_analysis": "Craft first",
        "directions": [{"title": "Studio", "reasoning": "Autonomy", "fit": "High"}],
        "short_term": ["Portfolio"],
        "mid_term": ["First client"],
        "action_guide": "One step a day",
        "suggested_tasks": [{"title": "Sketch", "frequency": "daily"}],
    }
    client = _ScriptedClient(json.dumps(plan))
    profile = VirtualSelfProfile(gender=Gender.FEMALE, summary="maker", avatar_url="data:image/png;base64,AAA")

    result = _gateway(client).generate_growth_plan(profile, _entries(3))

    assert client.text_requests[0]["model"] == "deep-model"
    assert "data:image" not in client.text_requests[0]["contents"]
    assert result.suggested_tasks[0].frequency is TaskFrequency.DAILY


def test_weekly_summary_prefers_this_weeks_entries() -> None:
    reply = {"period": "Week 1", "summary": "Good", "value_shifts": "None", "top_insights": ["Rest"]}
    client = _ScriptedClient(json.dumps(reply))
    old = ExperienceEntry(content="last-month", timestamp=now_ms() - 30 * 24 * 3600 * 1000)
    fresh = ExperienceEntry(content="yesterday", timestamp=now_ms() - 24 * 3600 * 1000)

    summary = _gateway(client).generate_weekly_summary([fresh, old])

    assert "yesterday" in client.text_requests[0]["contents"]
    assert "last-month" not in client.text_requests[0]["contents"]
    assert summary.generated_at > 0
    assert summary.period == "Week 1"


def test_companion_speech_is_returned_verbatim_or_defaults() -> None:
    profile = VirtualSelfProfile(gender=Gender.MALE, summary="calm")

    assert _gateway(_ScriptedClient("Proud of you.")).get_companion_speech("ctx", profile) == "Proud of you."
    assert _gateway(_ScriptedClient("  ")).get_companion_speech("ctx", profile) == DEFAULT_COMPANION_LINE


def test_check_in_feedback_lists_tasks() -> None:
    client = _ScriptedClient("")
    task = ActionTask(title="Stretch", frequency=TaskFrequency.DAILY, completed_dates=["2026-10-17"])

    feedback = _gateway(client).get_check_in_feedback([task], VirtualSelfProfile(gender=Gender.FEMALE))

    assert feedback == DEFAULT_CHECK_IN_LINE
    assert "Stretch" in client.text_requests[0]["contents"]


def test_generate_avatar_returns_data_uri() -> None:
    client = _ScriptedClient(images=["iVBORw0KGgo="])

    avatar = _gateway(client).generate_avatar("yellow raincoat", Gender.FEMALE)

    assert avatar == "data:image/png;base64,iVBORw0KGgo="
    assert "girl" in client.image_requests[0]["prompt"]
    assert "yellow raincoat" in client.image_requests[0]["prompt"]


def test_generate_avatar_without_image_fails_after_retries() -> None:
    sleeps: list = []
    client = _ScriptedClient(images=[None, None, None, None])

    with pytest.raises(PipelineFailure) as exc_info:
        _gateway(client, sleeps).generate_avatar("suit", Gender.MALE)

    assert exc_info.value.kind is FailureKind.DATA_FORMAT
    assert len(client.image_requests) == 4
    assert sleeps == [0.5, 0.5, 0.5]


@pytest.mark.parametrize(
    "gender, voice",
    [(Gender.MALE, "onyx"), (Gender.FEMALE, "nova"), (Gender.NON_BINARY, "nova")],
)
def test_speech_voice_depends_only_on_gender(gender: Gender, voice: str) -> None:
    client = _ScriptedClient(audio=["UENN"])

    assert _gateway(client).generate_speech("hi", gender) == "UENN"
    assert client.speech_requests[0]["voice"] == voice


def test_unexpected_error_is_unknown_failure() -> None:
    client = _ScriptedClient(*[KeyError("boom") for _ in range(4)])

    with pytest.raises(PipelineFailure) as exc_info:
        _gateway(client).get_companion_speech("ctx", VirtualSelfProfile(gender=Gender.MALE))

    assert exc_info.value.kind is FailureKind.UNKNOWN


def test_initialize_profile_without_outfit_still_succeeds() -> None:
    payload = _profile_payload()
    del payload["ootd"]
    reply = {"profile": payload, "entries": [{"content": "Moved to Porto", "category": "personal"}]}

    draft = _gateway(_ScriptedClient(json.dumps(reply))).initialize_profile(_answers())

    assert draft.profile.ootd is None
    assert draft.entries[0].content == "Moved to Porto"


def test_prose_keeps_surrounding_whitespace() -> None:
    profile = VirtualSelfProfile(gender=Gender.FEMALE)

    assert _gateway(_ScriptedClient("  Take a breath.\n")).get_companion_speech("ctx", profile) == "  Take a breath.\n"
    assert _gateway(_ScriptedClient("\nGood week!")).get_check_in_feedback([], profile) == "\nGood week!"
