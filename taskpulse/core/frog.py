"""Eat That Frog — picking and tracking the day's most important task.

Pure helpers: every function returns updated task copies for the caller to
persist and never touches storage itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable

from taskpulse.core.dates import parse_iso_date
from taskpulse.core.scoring import FROG_MIN_SCORE, is_frog_for, rank_tasks, score_task
from taskpulse.data.models import Priority, Status, Task

logger = logging.getLogger(__name__)

_FROG_PRIORITIES = (Priority.URGENT, Priority.HIGH)

_STATUS_PROGRESS = {
    Status.TODO: 0,
    Status.IN_PROGRESS: 50,
    Status.DONE: 100,
}


def potential_frogs(tasks: Iterable[Task], today: date) -> list[Task]:
    """Open Urgent/High tasks due today or overdue, Urgent first."""
    candidates = []
    for task in tasks:
        due = parse_iso_date(task.due_date)
        if task.status == Status.DONE or due is None or due > today:
            continue
        if task.priority in _FROG_PRIORITIES:
            candidates.append(task)
    candidates.sort(key=lambda t: _FROG_PRIORITIES.index(t.priority))
    return candidates


def current_frog(tasks: Iterable[Task], today: date) -> Task | None:
    return next((t for t in tasks if is_frog_for(t, today)), None)


def designate_frog(
    tasks: Iterable[Task], task_id: str, today: date, now: datetime,
) -> list[Task]:
    """Flag ``task_id`` as today's frog, clearing any previous frog for today.

    Returns the updated copies (cleared frogs first, the new frog last).
    Raises ValueError if ``task_id`` is not among ``tasks``.
    """
    tasks = list(tasks)
    chosen = next((t for t in tasks if t.id == task_id), None)
    if chosen is None:
        raise ValueError(f"Task {task_id} not found")

    stamp = now.isoformat()
    updates = [
        replace(t, is_eat_that_frog=False, eat_that_frog_date=None, updated_at=stamp)
        for t in tasks
        if t.id != task_id and is_frog_for(t, today)
    ]
    updates.append(
        replace(chosen, is_eat_that_frog=True, eat_that_frog_date=today.isoformat(), updated_at=stamp)
    )
    logger.info("Task %s designated as frog for %s", task_id, today.isoformat())
    return updates


def complete_frog(task: Task, now: datetime) -> Task:
    return replace(
        task, status=Status.DONE, is_eat_that_frog=False, updated_at=now.isoformat(),
    )


def frog_progress(task: Task | None) -> int:
    """Percentage progress shown for the current frog."""
    if task is None:
        return 0
    return _STATUS_PROGRESS.get(task.status, 0)


@dataclass
class DailyProgress:
    frogs_eaten: int
    total_frogs: int


def daily_progress(
    tasks: Iterable[Task], now: datetime, assignee_id: str | None = None,
) -> DailyProgress:
    """Count frogs finished today against today's remaining shortlist.

    A task counts as an eaten frog when it was marked Done today and would
    still have cleared the shortlist threshold.
    """
    tasks = list(tasks)
    today = now.date().isoformat()
    eaten = [
        t for t in tasks
        if t.status == Status.DONE
        and t.updated_at.startswith(today)
        and (assignee_id is None or t.assignee_id == assignee_id)
        and score_task(t, now).total >= FROG_MIN_SCORE
    ]
    remaining = rank_tasks(tasks, now, assignee_id=assignee_id).candidates
    return DailyProgress(frogs_eaten=len(eaten), total_frogs=len(remaining) + len(eaten))
