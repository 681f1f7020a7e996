"""
TaskPulse — Task Scoring Engine.

Scores open tasks on two independent axes, urgency (deadline pressure) and
importance (weight of the work itself), and offers two views over the
scores: a ranked "Eat That Frog" shortlist and the Eisenhower 2x2 matrix.

No I/O and no mutation: scores are recomputed from the task fields and the
evaluation instant every time and are never stored on the task.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Iterable

from taskpulse.core.dates import parse_iso_date, parse_iso_timestamp
from taskpulse.data.models import Priority, Status, Task

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Weighting table
# ---------------------------------------------------------------------------

OVERDUE_BONUS = 50
STALE_BONUS = 15
STALE_AFTER_DAYS = 7
KEYWORD_BONUS = 25
FROG_BONUS = 40

# (max days until due, bonus), checked in order
DUE_PROXIMITY_BONUS: list[tuple[int, int]] = [(1, 40), (3, 25), (7, 15)]

PRIORITY_URGENCY: dict[Priority, int] = {
    Priority.URGENT: 30,
    Priority.HIGH: 20,
    Priority.MEDIUM: 10,
    Priority.LOW: 0,
}

PRIORITY_IMPORTANCE: dict[Priority, int] = {
    Priority.URGENT: 25,
    Priority.HIGH: 35,
    Priority.MEDIUM: 15,
    Priority.LOW: 0,
}

# (min estimated minutes, bonus, reason), checked in order
DURATION_IMPORTANCE: list[tuple[int, int, str]] = [
    (240, 30, "Large, impactful task (4+ hours)"),
    (120, 20, "Significant task (2+ hours)"),
    (60, 15, "Substantial task (1+ hours)"),
]

AVOIDANCE_KEYWORDS = ("difficult", "complex", "challenging")

OVERDUE_REASON = "⚠️ OVERDUE - This is your biggest frog!"

FROG_MIN_SCORE = 15
FROG_SHORTLIST_SIZE = 5

URGENT_THRESHOLD = 25
IMPORTANT_THRESHOLD = 25


@dataclass
class TaskScore:
    """Score breakdown for one task at one instant."""

    task: Task
    urgency: int
    importance: int
    reasons: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.urgency + self.importance


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def _due_reason(days_until_due: int) -> str:
    if days_until_due <= 0:
        return "Due today"
    if days_until_due == 1:
        return "Due tomorrow"
    if days_until_due <= 3:
        return f"Due in {days_until_due} days"
    return "Due this week"


def is_frog_for(task: Task, day: date) -> bool:
    """Whether the task is flagged as the frog for ``day``.

    The flag applies to its frog date, else to the due date; an undated flag
    applies to any day.
    """
    if not task.is_eat_that_frog:
        return False
    flagged_day = task.eat_that_frog_date or task.due_date
    return not flagged_day or flagged_day == day.isoformat()


def score_task(task: Task, now: datetime) -> TaskScore:
    """Compute urgency, importance and human-readable reasons for a task.

    Every rule fires independently and contributions are summed. An overdue
    task gets the overdue bonus instead of a due-date proximity bonus, and
    its reason is placed first.
    """
    urgency = 0
    importance = 0
    reasons: list[str] = []
    overdue = False
    try:
        priority = Priority(task.priority)
    except ValueError:
        logger.debug("Task %s: unknown priority %r ignored", task.id, task.priority)
        priority = None

    # Urgency: deadline
    due = parse_iso_date(task.due_date)
    if task.due_date and due is None:
        logger.debug("Task %s: unparseable due date %r ignored", task.id, task.due_date)
    if due is not None:
        days_until_due = (due - now.date()).days
        if days_until_due < 0:
            overdue = True
            urgency += OVERDUE_BONUS
        else:
            for max_days, bonus in DUE_PROXIMITY_BONUS:
                if days_until_due <= max_days:
                    urgency += bonus
                    reasons.append(_due_reason(days_until_due))
                    break

    # Urgency: priority
    urgency += PRIORITY_URGENCY.get(priority, 0)
    if priority == Priority.URGENT:
        reasons.append("Marked as urgent priority")
    elif priority == Priority.HIGH:
        reasons.append("High priority task")

    # Urgency: not started for a while
    created = parse_iso_timestamp(task.created_at, like=now)
    if task.status == Status.TODO and created is not None:
        age_days = (now - created).total_seconds() / 86400
        if age_days >= STALE_AFTER_DAYS:
            urgency += STALE_BONUS
            reasons.append(f"Been pending for {math.ceil(age_days)} days")

    # Importance: priority
    importance += PRIORITY_IMPORTANCE.get(priority, 0)

    # Importance: size of the work
    if task.estimated_duration:
        for min_minutes, bonus, reason in DURATION_IMPORTANCE:
            if task.estimated_duration >= min_minutes:
                importance += bonus
                reasons.append(reason)
                break

    # Importance: tasks people tend to avoid
    text = f"{task.title} {task.description or ''}".lower()
    if any(word in text for word in AVOIDANCE_KEYWORDS):
        importance += KEYWORD_BONUS
        reasons.append("Challenging task that could unlock progress")

    if is_frog_for(task, now.date()):
        importance += FROG_BONUS
        reasons.append("Designated as today's frog")

    if overdue:
        reasons.insert(0, OVERDUE_REASON)

    return TaskScore(task=task, urgency=urgency, importance=importance, reasons=reasons)


def eligible_tasks(tasks: Iterable[Task], assignee_id: str | None = None) -> list[Task]:
    """Open tasks, optionally restricted to one assignee."""
    return [
        t for t in tasks
        if t.status != Status.DONE
        and (assignee_id is None or t.assignee_id == assignee_id)
    ]


# ---------------------------------------------------------------------------
# Ranked list mode
# ---------------------------------------------------------------------------


@dataclass
class FrogRanking:
    """Top-scoring open tasks; ``top_pick`` is the biggest frog."""

    candidates: list[TaskScore]

    @property
    def top_pick(self) -> TaskScore | None:
        return self.candidates[0] if self.candidates else None


def rank_tasks(
    tasks: Iterable[Task],
    now: datetime,
    assignee_id: str | None = None,
    min_score: int = FROG_MIN_SCORE,
    limit: int = FROG_SHORTLIST_SIZE,
) -> FrogRanking:
    """Rank open tasks by total score, highest first.

    Tasks below ``min_score`` are dropped. Equal totals keep their input
    order (the sort is stable and there is no secondary key).
    """
    scored = [score_task(t, now) for t in eligible_tasks(tasks, assignee_id)]
    shortlisted = [s for s in scored if s.total >= min_score]
    shortlisted.sort(key=lambda s: s.total, reverse=True)
    return FrogRanking(candidates=shortlisted[:limit])


# ---------------------------------------------------------------------------
# Quadrant mode
# ---------------------------------------------------------------------------


class Quadrant(int, Enum):
    DO_FIRST = 1
    SCHEDULE = 2
    DELEGATE = 3
    ELIMINATE = 4


@dataclass(frozen=True)
class QuadrantInfo:
    title: str
    subtitle: str
    description: str
    action: str
    suggested_priority: Priority


QUADRANT_INFO: dict[Quadrant, QuadrantInfo] = {
    Quadrant.DO_FIRST: QuadrantInfo(
        title="Do First",
        subtitle="Urgent & Important",
        description="Crisis situations, emergency issues, last-minute items",
        action="DO NOW",
        suggested_priority=Priority.URGENT,
    ),
    Quadrant.SCHEDULE: QuadrantInfo(
        title="Schedule",
        subtitle="Important & Not Urgent",
        description="Long-term goals, planning, prevention, development",
        action="PLAN IT",
        suggested_priority=Priority.HIGH,
    ),
    Quadrant.DELEGATE: QuadrantInfo(
        title="Delegate",
        subtitle="Urgent & Not Important",
        description="Interruptions, some emails, phone calls, meetings",
        action="DELEGATE",
        suggested_priority=Priority.MEDIUM,
    ),
    Quadrant.ELIMINATE: QuadrantInfo(
        title="Eliminate",
        subtitle="Not Urgent & Not Important",
        description="Time wasters, busy work, excessive social media",
        action="DELETE",
        suggested_priority=Priority.LOW,
    ),
}


def quadrant_for(score: TaskScore) -> Quadrant:
    is_urgent = score.urgency >= URGENT_THRESHOLD
    is_important = score.importance >= IMPORTANT_THRESHOLD
    if is_urgent and is_important:
        return Quadrant.DO_FIRST
    if is_important:
        return Quadrant.SCHEDULE
    if is_urgent:
        return Quadrant.DELEGATE
    return Quadrant.ELIMINATE


def classify_quadrants(
    tasks: Iterable[Task],
    now: datetime,
    assignee_id: str | None = None,
) -> dict[Quadrant, list[TaskScore]]:
    """Place every open task in exactly one Eisenhower quadrant.

    All four quadrants are present in the result, possibly empty, and keep
    the input order of their tasks.
    """
    quadrants: dict[Quadrant, list[TaskScore]] = {q: [] for q in Quadrant}
    for task in eligible_tasks(tasks, assignee_id):
        score = score_task(task, now)
        quadrants[quadrant_for(score)].append(score)
    return quadrants


def apply_quadrant_action(task: Task, quadrant: Quadrant, now: datetime) -> Task:
    """Return a copy of ``task`` reclassified to the quadrant's suggested priority.

    This is the explicit, user-triggered follow-up to classification; the
    caller persists the returned task.
    """
    info = QUADRANT_INFO[quadrant]
    logger.info(
        "Task %s moved to priority %s (%s)", task.id, info.suggested_priority.value, info.title,
    )
    return replace(task, priority=info.suggested_priority, updated_at=now.isoformat())
