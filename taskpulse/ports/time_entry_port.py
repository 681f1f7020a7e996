"""Time entry port — where finished Pomodoro phases are recorded.

TimeEntryDB satisfies it; a hosted task backend can too.
"""

from __future__ import annotations

from typing import Protocol

from taskpulse.data.models import TimeEntry


class TimeEntryPort(Protocol):
    """Abstract time entry sink used by the Pomodoro runner."""

    def add_entry(self, entry: TimeEntry, user_id: int | None = None) -> TimeEntry: ...
