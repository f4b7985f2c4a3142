"""Prompt text for the companion's AI operations."""
from __future__ import annotations

import json
from typing import Type

from pydantic import BaseModel

from companion.domain.entities import Gender

COMPANION_PERSONA = (
    "You are the user's 'virtual self': a warm, perceptive companion who talks like a close friend "
    "in their twenties. Keep the tone natural, quick and conversational.\n"
    "Core rule: never invent facts. Everything you say must stay 100% faithful to what the user wrote."
)

CATEGORY_GUIDE = (
    "Allowed experience categories: CAREER, ACHIEVEMENT, JOY, CHOICE_REGRET, INTEREST, "
    "ABILITY_SHORTCOMING, VISION, ANXIETY, PERSONAL."
)


def schema_block(shape: Type[BaseModel]) -> str:
    schema_json = json.dumps(shape.model_json_schema(), indent=2, ensure_ascii=False)
    return f"### OUTPUT REQUIREMENT\nReturn strictly valid JSON matching this schema:\n{schema_json}"


def onboarding_instruction(shape: Type[BaseModel]) -> str:
    return (
        f"{COMPANION_PERSONA}\n\n"
        "Task: build the user's initial profile from their onboarding answers. "
        "Split the answers into several atomic experience entries, each with a category and short tags. "
        "Describe an outfit (`ootd`) that fits the personality so an avatar can be drawn.\n"
        f"{CATEGORY_GUIDE}\n\n"
        f"{schema_block(shape)}"
    )


def profile_update_instruction(shape: Type[BaseModel]) -> str:
    return (
        f"{COMPANION_PERSONA}\n\n"
        "Task: update the user's profile so it reflects the experiences below, most recent first.\n\n"
        f"{schema_block(shape)}"
    )


def raw_input_instruction(shape: Type[BaseModel]) -> str:
    return (
        "Convert the user's free-form text into one or more experience entries. "
        "Keep the user's own wording in `content`; do not add events they did not mention.\n"
        f"{CATEGORY_GUIDE}\n\n"
        f"{schema_block(shape)}"
    )


def growth_plan_instruction(shape: Type[BaseModel]) -> str:
    return (
        "You are a thoughtful personal-development coach. Using the profile and experiences below, "
        "write a detailed growth plan: analyse the user's core values, propose career or life directions "
        "with reasoning and fit, list short-term and mid-term goals, write an action guide and suggest "
        "3-6 concrete habit tasks with a frequency of DAILY, WEEKLY or ONCE.\n\n"
        f"{schema_block(shape)}"
    )


def weekly_summary_instruction(shape: Type[BaseModel]) -> str:
    return (
        f"{COMPANION_PERSONA}\n\n"
        "Task: write this week's retrospective from the experiences below: a period label, a summary, "
        "how the user's values shifted and the top insights.\n\n"
        f"{schema_block(shape)}"
    )


def companion_instruction(profile_summary: str) -> str:
    return f"{COMPANION_PERSONA}\nCurrent state of the user: {profile_summary or 'unknown yet'}"


def avatar_prompt(ootd: str, gender: Gender) -> str:
    subject = {Gender.FEMALE: "girl", Gender.MALE: "boy"}.get(gender, "young person")
    return f"Anime 2D portrait, {subject}, wearing: {ootd}"
