"""
TaskPulse — Centralized configuration.

Loads all settings from .env and validates them.
Timer defaults here seed every new user's Pomodoro configuration.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

if TYPE_CHECKING:
    from taskpulse.core.pomodoro import PomodoroConfig

# Load .env from project root (one level up from taskpulse/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite (time entries + per-user timer settings)
    DATABASE_PATH: str = "data/taskpulse.db"

    # Pomodoro defaults (minutes)
    POMODORO_WORK_DURATION: int = 25
    POMODORO_SHORT_BREAK: int = 5
    POMODORO_LONG_BREAK: int = 15
    POMODOROS_UNTIL_LONG_BREAK: int = 4
    AUTO_START_BREAKS: bool = False
    AUTO_START_WORK: bool = False
    SHOW_NOTIFICATIONS: bool = True

    # Daily planner
    DEFAULT_TASK_DURATION: int = 30
    WORKING_HOURS_START: str = "09:00"
    WORKING_HOURS_END: str = "17:00"

    LOG_LEVEL: str = "INFO"

    @field_validator("WORKING_HOURS_START", "WORKING_HOURS_END")
    @classmethod
    def parse_hhmm(cls, v: str) -> str:
        from taskpulse.core.dates import hhmm_to_minutes

        hhmm_to_minutes(v)
        return v.strip()

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"

    def timer_config(self) -> PomodoroConfig:
        """Default timer configuration. Raises TimerConfigError if invalid."""
        from taskpulse.core.pomodoro import validate_config

        return validate_config({
            "work_duration": self.POMODORO_WORK_DURATION,
            "short_break_duration": self.POMODORO_SHORT_BREAK,
            "long_break_duration": self.POMODORO_LONG_BREAK,
            "pomodoros_until_long_break": self.POMODOROS_UNTIL_LONG_BREAK,
            "auto_start_breaks": self.AUTO_START_BREAKS,
            "auto_start_work": self.AUTO_START_WORK,
            "show_notifications": self.SHOW_NOTIFICATIONS,
        })


def _load_settings() -> Settings:
    """Load settings from environment, falling back to defaults."""
    return Settings(
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/taskpulse.db"),
        POMODORO_WORK_DURATION=os.getenv("POMODORO_WORK_DURATION", "25"),
        POMODORO_SHORT_BREAK=os.getenv("POMODORO_SHORT_BREAK", "5"),
        POMODORO_LONG_BREAK=os.getenv("POMODORO_LONG_BREAK", "15"),
        POMODOROS_UNTIL_LONG_BREAK=os.getenv("POMODOROS_UNTIL_LONG_BREAK", "4"),
        AUTO_START_BREAKS=os.getenv("AUTO_START_BREAKS", "false"),
        AUTO_START_WORK=os.getenv("AUTO_START_WORK", "false"),
        SHOW_NOTIFICATIONS=os.getenv("SHOW_NOTIFICATIONS", "true"),
        DEFAULT_TASK_DURATION=os.getenv("DEFAULT_TASK_DURATION", "30"),
        WORKING_HOURS_START=os.getenv("WORKING_HOURS_START", "09:00"),
        WORKING_HOURS_END=os.getenv("WORKING_HOURS_END", "17:00"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by other modules as:
#   from taskpulse.config import settings
settings = _load_settings()
