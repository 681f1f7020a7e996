"""
TaskPulse — Local Database.

Time entries derived from finished Pomodoro phases (and manual input) and
per-user timer settings persist in SQLite, surviving restarts.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from taskpulse.core.pomodoro import PomodoroConfig, TimerConfigError, validate_config
from taskpulse.data.models import TimeEntry

logger = logging.getLogger(__name__)


class TimeEntryDB:
    """SQLite-backed storage for tracked time."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from taskpulse.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS time_entries (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id     TEXT    NOT NULL,
                    start_time  TEXT    NOT NULL,
                    end_time    TEXT,
                    duration    INTEGER NOT NULL,
                    description TEXT    NOT NULL DEFAULT '',
                    is_manual   INTEGER NOT NULL DEFAULT 0,
                    user_id     INTEGER
                )
            """)
        logger.debug("Time entries table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> TimeEntry:
        return TimeEntry(
            id=row["id"],
            task_id=row["task_id"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            duration=row["duration"],
            description=row["description"],
            is_manual=bool(row["is_manual"]),
        )

    def add_entry(self, entry: TimeEntry, user_id: int | None = None) -> TimeEntry:
        """Insert an entry and return it with its new ID."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO time_entries
                    (task_id, start_time, end_time, duration, description, is_manual, user_id)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.task_id, entry.start_time, entry.end_time, entry.duration,
                    entry.description, int(entry.is_manual), user_id,
                ),
            )
            entry_id = cursor.lastrowid

        logger.info(
            "Time entry #%d added: task %s, %ds", entry_id, entry.task_id, entry.duration,
        )
        return TimeEntry(
            id=entry_id,
            task_id=entry.task_id,
            start_time=entry.start_time,
            end_time=entry.end_time,
            duration=entry.duration,
            description=entry.description,
            is_manual=entry.is_manual,
        )

    def get_entry(self, entry_id: int) -> TimeEntry | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM time_entries WHERE id = ?", (entry_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_entry(row)

    def list_entries(
        self, task_id: str | None = None, user_id: int | None = None,
    ) -> list[TimeEntry]:
        """List entries, newest first, optionally filtered by task and/or user."""
        conditions: list[str] = []
        params: list = []
        if task_id is not None:
            conditions.append("task_id = ?")
            params.append(task_id)
        if user_id is not None:
            conditions.append("user_id = ?")
            params.append(user_id)

        query = "SELECT * FROM time_entries"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY start_time DESC, id DESC"

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def total_seconds(self, task_id: str) -> int:
        """Total tracked seconds for a task."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COALESCE(SUM(duration), 0) AS total FROM time_entries WHERE task_id = ?",
                (task_id,),
            ).fetchone()
        return row["total"]

    def delete_entry(self, entry_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM time_entries WHERE id = ?", (entry_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Time entry #%d deleted", entry_id)
        return deleted


class SettingsDB:
    """SQLite-backed per-user Pomodoro settings, stored as JSON."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from taskpulse.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS timer_settings (
                    user_id       INTEGER PRIMARY KEY,
                    settings_json TEXT    NOT NULL
                )
            """)
        logger.debug("Timer settings table initialized at %s", self._db_path)

    def load(self, user_id: int, defaults: PomodoroConfig | None = None) -> PomodoroConfig:
        """Stored settings merged over ``defaults``.

        Unreadable or invalid stored settings are logged and the defaults
        are returned instead.
        """
        if defaults is None:
            from taskpulse.config import settings
            defaults = settings.timer_config()

        with self._connect() as conn:
            row = conn.execute(
                "SELECT settings_json FROM timer_settings WHERE user_id = ?", (user_id,)
            ).fetchone()
        if row is None:
            return defaults

        try:
            stored = json.loads(row["settings_json"])
            return validate_config({**defaults.model_dump(), **stored})
        except (json.JSONDecodeError, TypeError, TimerConfigError) as exc:
            logger.warning("Stored timer settings for user %d ignored: %s", user_id, exc)
            return defaults

    def save(self, user_id: int, config: PomodoroConfig) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO timer_settings (user_id, settings_json) VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET settings_json = excluded.settings_json
                """,
                (user_id, config.model_dump_json()),
            )
        logger.info("Timer settings saved for user %d", user_id)

    def update(self, user_id: int, **changes) -> PomodoroConfig:
        """Validate ``changes`` against the current settings and store them.

        Raises TimerConfigError and stores nothing if the result is invalid.
        """
        current = self.load(user_id)
        new_config = validate_config({**current.model_dump(), **changes})
        self.save(user_id, new_config)
        return new_config
