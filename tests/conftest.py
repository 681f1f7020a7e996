"""Shared test fixtures and configuration.

Sets up environment variables before any taskpulse imports so the settings
singleton never points at a real database, and provides common fixtures
like temp DBs and a task factory.
"""

import os
import tempfile

# Patch env vars BEFORE any taskpulse imports
os.environ.setdefault(
    "DATABASE_PATH", os.path.join(tempfile.mkdtemp(prefix="taskpulse-tests-"), "test.db"),
)
os.environ.setdefault("POMODORO_WORK_DURATION", "25")
os.environ.setdefault("POMODORO_SHORT_BREAK", "5")
os.environ.setdefault("POMODORO_LONG_BREAK", "15")
os.environ.setdefault("POMODOROS_UNTIL_LONG_BREAK", "4")

from datetime import datetime

import pytest

NOW = datetime(2026, 3, 10, 9, 30)


@pytest.fixture
def now():
    """A fixed evaluation instant: Tuesday 2026-03-10 09:30 (naive)."""
    return NOW


@pytest.fixture
def make_task():
    """Factory for Task records with sensible defaults."""
    from taskpulse.data.models import Priority, Status, Task

    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "id": f"t{counter['n']}",
            "title": f"Task {counter['n']}",
            "priority": Priority.LOW,
            "status": Status.TODO,
            "created_at": "2026-03-09T08:00:00",
            "updated_at": "2026-03-09T08:00:00",
        }
        fields.update(overrides)
        return Task(**fields)

    return _make


@pytest.fixture
def time_entry_db(tmp_path):
    """Return a TimeEntryDB instance backed by a temp file."""
    from taskpulse.data.db import TimeEntryDB
    return TimeEntryDB(db_path=str(tmp_path / "test_entries.db"))


@pytest.fixture
def settings_db(tmp_path):
    """Return a SettingsDB instance backed by a temp file."""
    from taskpulse.data.db import SettingsDB
    return SettingsDB(db_path=str(tmp_path / "test_settings.db"))
