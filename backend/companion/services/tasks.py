"""Pure helpers for action tasks."""
from __future__ import annotations

from datetime import date
from typing import List

from companion.domain.entities import ActionTask, GrowthPlan, now_ms


def toggle_completion(task: ActionTask, today: date) -> ActionTask:
    """
    Flip today's completion on a task.

    Adding records today's ISO date once and moves ``last_completed`` to it. Removing
    drops only today's date and leaves ``last_completed`` as it was.
    """
    stamp = today.isoformat()
    if stamp in task.completed_dates:
        dates = [value for value in task.completed_dates if value != stamp]
        return task.model_copy(update={"completed_dates": dates})
    return task.model_copy(
        update={"completed_dates": [*task.completed_dates, stamp], "last_completed": stamp}
    )


def tasks_from_plan(plan: GrowthPlan) -> List[ActionTask]:
    created_at = now_ms()
    return [
        ActionTask(title=suggestion.title, frequency=suggestion.frequency, created_at=created_at)
        for suggestion in plan.suggested_tasks
    ]
