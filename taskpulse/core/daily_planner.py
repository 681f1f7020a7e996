"""
TaskPulse — Daily Planner (time boxing).

Lays time boxes out on a single day: lookup by slot, day statistics and
free-slot search inside working hours. Pure logic over TimeBox records.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Iterable

from taskpulse.core.dates import hhmm_to_minutes, minutes_to_hhmm, parse_iso_timestamp
from taskpulse.data.models import TimeBox

logger = logging.getLogger(__name__)

SLOT_MINUTES = 30


def make_time_box(
    title: str,
    day: date,
    start: str,
    duration_minutes: int,
    task_id: str | None = None,
    description: str = "",
    color: str = "#0ea5e9",
) -> TimeBox:
    """Create a time box starting at ``start`` (HH:MM) on ``day``.

    Raises ValueError for an empty title, a malformed start time or a
    non-positive duration.
    """
    if not title.strip():
        raise ValueError("Time box needs a title")
    if duration_minutes <= 0:
        raise ValueError(f"Duration must be positive, got {duration_minutes}")
    start_min = hhmm_to_minutes(start)
    start_dt = datetime.combine(day, datetime.min.time()) + timedelta(minutes=start_min)
    end_dt = start_dt + timedelta(minutes=duration_minutes)
    return TimeBox(
        id=uuid.uuid4().hex,
        title=title.strip(),
        start_time=start_dt.isoformat(),
        end_time=end_dt.isoformat(),
        task_id=task_id or None,
        description=description,
        color=color,
    )


def _bounds(box: TimeBox) -> tuple[datetime, datetime] | None:
    # UTC records are compared as naive local time, like the day grid.
    start = parse_iso_timestamp(box.start_time, like=datetime.min)
    end = parse_iso_timestamp(box.end_time, like=datetime.min)
    if start is None or end is None:
        logger.debug("Time box %s has unusable bounds", box.id)
        return None
    return start, end


def day_time_boxes(boxes: Iterable[TimeBox], day: date) -> list[TimeBox]:
    """Time boxes starting on ``day``, earliest first."""
    dated = []
    for box in boxes:
        bounds = _bounds(box)
        if bounds is not None and bounds[0].date() == day:
            dated.append((bounds[0], box))
    dated.sort(key=lambda pair: pair[0])
    return [box for _, box in dated]


def time_box_for_slot(boxes: Iterable[TimeBox], day: date, slot: str) -> TimeBox | None:
    """The time box covering ``slot`` (HH:MM) on ``day``, if any."""
    slot_dt = datetime.combine(day, datetime.min.time()) + timedelta(minutes=hhmm_to_minutes(slot))
    for box in day_time_boxes(boxes, day):
        start, end = _bounds(box)
        if start <= slot_dt < end:
            return box
    return None


def toggle_complete(box: TimeBox) -> TimeBox:
    return replace(box, is_completed=not box.is_completed)


@dataclass
class DayStats:
    total_planned: int      # minutes
    completion_rate: int    # percent
    completed_boxes: int
    total_boxes: int


def day_stats(boxes: Iterable[TimeBox], day: date) -> DayStats:
    day_boxes = day_time_boxes(boxes, day)
    planned = 0.0
    for box in day_boxes:
        start, end = _bounds(box)
        planned += (end - start).total_seconds() / 60
    completed = sum(1 for b in day_boxes if b.is_completed)
    total = len(day_boxes)
    return DayStats(
        total_planned=round(planned),
        completion_rate=round(completed / total * 100) if total else 0,
        completed_boxes=completed,
        total_boxes=total,
    )


def is_working_hours(slot: str, working_start: str, working_end: str) -> bool:
    """Whole-hour check, matching how the planner shades its timeline."""
    hour = hhmm_to_minutes(slot) // 60
    return hhmm_to_minutes(working_start) // 60 <= hour < hhmm_to_minutes(working_end) // 60


def overlaps_any(start: int, end: int, busy: list[tuple[int, int]]) -> bool:
    """Check if [start, end) overlaps with any busy interval."""
    for bs, be in busy:
        if start < be and end > bs:
            return True
    return False


def free_slots(
    boxes: Iterable[TimeBox],
    day: date,
    duration_minutes: int,
    working_start: str,
    working_end: str,
) -> list[str]:
    """Start times (HH:MM, on the 30-minute grid) where a new box would fit.

    Only boxes on ``day`` count as busy; the whole box must fit inside
    working hours.
    """
    if duration_minutes <= 0:
        raise ValueError(f"Duration must be positive, got {duration_minutes}")
    day_start = hhmm_to_minutes(working_start)
    day_end = hhmm_to_minutes(working_end)

    busy: list[tuple[int, int]] = []
    midnight = datetime.combine(day, datetime.min.time())
    for box in day_time_boxes(boxes, day):
        start, end = _bounds(box)
        start_min = int((start - midnight).total_seconds() // 60)
        end_min = int((end - midnight).total_seconds() // 60)
        busy.append((start_min, end_min))
    busy.sort()

    t = day_start
    remainder = t % SLOT_MINUTES
    if remainder:
        t += SLOT_MINUTES - remainder

    slots: list[str] = []
    while t + duration_minutes <= day_end:
        if not overlaps_any(t, t + duration_minutes, busy):
            slots.append(minutes_to_hhmm(t))
        t += SLOT_MINUTES
    return slots
