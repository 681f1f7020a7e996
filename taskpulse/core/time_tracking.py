"""Time tracking — turning finished Pomodoro phases and manual input into
time entries, and summarising tracked time.

No I/O: storage is handled by taskpulse.data.db.TimeEntryDB.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable

from taskpulse.core.dates import parse_iso_timestamp
from taskpulse.core.pomodoro import PhaseCompleted
from taskpulse.data.models import Status, Task, TimeEntry

logger = logging.getLogger(__name__)

_DEFAULT_PRODUCTIVE_HOUR = 9


def session_to_time_entry(event: PhaseCompleted) -> TimeEntry | None:
    """Convert a finished phase into a time entry for its task.

    Phases without a task or that never started produce no entry.
    """
    if not event.task_id or event.start_time is None:
        return None
    return TimeEntry(
        id=None,
        task_id=event.task_id,
        start_time=event.start_time.isoformat(),
        end_time=event.end_time.isoformat(),
        duration=event.duration,
        description=f"Pomodoro session - {event.state.value}",
        is_manual=False,
    )


def manual_time_entry(
    task_id: str, minutes: int, day: date, description: str = "",
) -> TimeEntry:
    """Build a hand-entered time entry, placed at noon of ``day``.

    Raises ValueError for a missing task or a non-positive duration.
    """
    if not task_id:
        raise ValueError("task_id is required")
    if minutes <= 0:
        raise ValueError(f"Duration must be positive, got {minutes}")
    start = datetime.combine(day, time(12, 0))
    end = start + timedelta(minutes=minutes)
    return TimeEntry(
        id=None,
        task_id=task_id,
        start_time=start.isoformat(),
        end_time=end.isoformat(),
        duration=minutes * 60,
        description=description,
        is_manual=True,
    )


@dataclass
class TimeTrackingStats:
    """Aggregates in minutes, except the hour (0-23) and the percentage."""

    total_time_today: int
    total_time_this_week: int
    total_time_this_month: int
    average_daily_time: int
    most_productive_hour: int
    task_completion_rate: int


def tracking_stats(
    entries: Iterable[TimeEntry], tasks: Iterable[Task], now: datetime,
) -> TimeTrackingStats:
    """Summarise tracked time relative to ``now``. Weeks start on Sunday."""
    today = now.date()
    start_of_week = today - timedelta(days=(today.weekday() + 1) % 7)
    start_of_month = today.replace(day=1)
    last_7_days = {today - timedelta(days=i) for i in range(7)}

    today_s = week_s = month_s = last_7_s = 0
    per_hour: dict[int, int] = defaultdict(int)
    for entry in entries:
        started = parse_iso_timestamp(entry.start_time, like=now)
        if started is None:
            logger.debug("Time entry %s has no usable start time", entry.id)
            continue
        day = started.date()
        if day == today:
            today_s += entry.duration
        if day >= start_of_week:
            week_s += entry.duration
        if day >= start_of_month:
            month_s += entry.duration
        if day in last_7_days:
            last_7_s += entry.duration
        per_hour[started.hour] += entry.duration

    most_productive = _DEFAULT_PRODUCTIVE_HOUR
    if per_hour:
        most_productive = max(per_hour, key=lambda h: per_hour[h])

    tasks = list(tasks)
    done = sum(1 for t in tasks if t.status == Status.DONE)
    rate = round(done / len(tasks) * 100) if tasks else 0

    return TimeTrackingStats(
        total_time_today=round(today_s / 60),
        total_time_this_week=round(week_s / 60),
        total_time_this_month=round(month_s / 60),
        average_daily_time=round(last_7_s / 60 / 7),
        most_productive_hour=most_productive,
        task_completion_rate=rate,
    )
