"""
TaskPulse — Data Models.

Plain records shared between the scoring engine, the Pomodoro timer and the
SQLite stores. Dates travel as ISO strings, the same way the hosted task
database hands them over, so a malformed value can be skipped at read time
instead of failing at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class Status(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


@dataclass
class Task:
    """A team task, reduced to the fields the productivity tools read."""

    id: str
    title: str
    description: str = ""
    assignee_id: str | None = None
    due_date: str | None = None            # ISO date YYYY-MM-DD
    priority: Priority = Priority.MEDIUM
    status: Status = Status.TODO
    estimated_duration: int | None = None  # minutes
    is_eat_that_frog: bool = False
    eat_that_frog_date: str | None = None  # ISO date the frog flag applies to
    created_at: str = ""                   # ISO timestamp
    updated_at: str = ""                   # ISO timestamp


@dataclass
class TimeEntry:
    """Time spent on a task, tracked live or entered by hand."""

    id: int | None
    task_id: str
    start_time: str                 # ISO timestamp
    duration: int                   # seconds
    end_time: str | None = None     # ISO timestamp
    description: str = ""
    is_manual: bool = False


@dataclass
class TimeBox:
    """A planned block of time on the daily planner."""

    id: str
    title: str
    start_time: str                 # ISO timestamp
    end_time: str                   # ISO timestamp
    task_id: str | None = None
    description: str = ""
    color: str = "#0ea5e9"
    is_completed: bool = False
