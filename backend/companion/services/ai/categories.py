"""Map loose model category labels onto the closed experience categories."""
from __future__ import annotations

from typing import List, Optional, Tuple

from companion.domain.entities import ExperienceCategory

# Checked in order; the first keyword found in the label wins.
CATEGORY_KEYWORDS: List[Tuple[str, ExperienceCategory]] = [
    ("CAREER", ExperienceCategory.CAREER),
    ("ACHIEVEMENT", ExperienceCategory.ACHIEVEMENT),
    ("JOY", ExperienceCategory.JOY),
    ("REGRET", ExperienceCategory.CHOICE_REGRET),
    ("INTEREST", ExperienceCategory.INTEREST),
    ("ABILITY", ExperienceCategory.ABILITY_SHORTCOMING),
    ("VISION", ExperienceCategory.VISION),
    ("ANXIETY", ExperienceCategory.ANXIETY),
]


def normalize_category(label: Optional[str]) -> ExperienceCategory:
    if isinstance(label, ExperienceCategory):
        return label
    if not label:
        return ExperienceCategory.PERSONAL
    folded = str(label).upper().strip()
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in folded:
            return category
    return ExperienceCategory.PERSONAL
