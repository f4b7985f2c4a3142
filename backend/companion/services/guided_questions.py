"""Fixed bank of guided reflection questions."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from companion.domain.entities import ExperienceCategory, ExperienceEntry, GuidedQuestion

QUESTION_BANK: List[GuidedQuestion] = [
    GuidedQuestion(
        id="q-achievement",
        question="What is an achievement you are proud of, and why does it matter to you?",
        category=ExperienceCategory.ACHIEVEMENT,
    ),
    GuidedQuestion(
        id="q-joy",
        question="When did you last lose track of time because you were enjoying yourself?",
        category=ExperienceCategory.JOY,
    ),
    GuidedQuestion(
        id="q-interest",
        question="What topic could you keep learning about even if nobody paid you?",
        category=ExperienceCategory.INTEREST,
    ),
]

_BY_ID: Dict[str, GuidedQuestion] = {question.id: question for question in QUESTION_BANK}

QA_TAG = "qa"


def get_question(question_id: str) -> Optional[GuidedQuestion]:
    return _BY_ID.get(question_id)


def next_question(library: Sequence[ExperienceEntry]) -> GuidedQuestion:
    """Pick the first question whose category has no answered entry yet, cycling otherwise."""
    answered = [entry for entry in library if QA_TAG in entry.tags]
    covered = {entry.category for entry in answered}
    for question in QUESTION_BANK:
        if question.category not in covered:
            return question
    return QUESTION_BANK[len(answered) % len(QUESTION_BANK)]
