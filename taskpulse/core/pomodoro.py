"""
TaskPulse — Pomodoro State Machine.

A countdown that cycles Work -> ShortBreak -> Work ... -> LongBreak, advanced
by one-second ticks. Phase completion is reported as a PhaseCompleted value
returned to the caller; persistence and notifications live elsewhere
(see taskpulse.core.runner).

No timers and no I/O here: the owner decides when a tick happens.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable

from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)


class TimerConfigError(ValueError):
    """Raised when a timer configuration is rejected."""


class PomodoroState(str, Enum):
    IDLE = "idle"
    WORK = "work"
    SHORT_BREAK = "short-break"
    LONG_BREAK = "long-break"


_BREAKS = (PomodoroState.SHORT_BREAK, PomodoroState.LONG_BREAK)


class PomodoroConfig(BaseModel):
    """Timer configuration. Durations are whole minutes."""

    work_duration: int = 25
    short_break_duration: int = 5
    long_break_duration: int = 15
    pomodoros_until_long_break: int = 4
    auto_start_breaks: bool = False
    auto_start_work: bool = False
    show_notifications: bool = True

    @field_validator(
        "work_duration",
        "short_break_duration",
        "long_break_duration",
        "pomodoros_until_long_break",
    )
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    def seconds_for(self, state: PomodoroState) -> int:
        if state == PomodoroState.SHORT_BREAK:
            return self.short_break_duration * 60
        if state == PomodoroState.LONG_BREAK:
            return self.long_break_duration * 60
        return self.work_duration * 60


def validate_config(values: dict) -> PomodoroConfig:
    """Build a PomodoroConfig, converting validation errors to TimerConfigError."""
    try:
        return PomodoroConfig.model_validate(values)
    except ValidationError as exc:
        raise TimerConfigError(str(exc)) from exc


@dataclass
class PomodoroSession:
    """Snapshot of the timer. ``duration`` and ``remaining_time`` are seconds."""

    state: PomodoroState
    duration: int
    remaining_time: int
    is_active: bool = False
    completed_pomodoros: int = 0
    start_time: datetime | None = None
    end_time: datetime | None = None
    task_id: str | None = None
    id: str = ""


@dataclass(frozen=True)
class PhaseCompleted:
    """Emitted once per finished phase, for recording as a time entry."""

    session_id: str
    state: PomodoroState
    duration: int
    start_time: datetime | None
    end_time: datetime
    task_id: str | None
    completed_pomodoros: int
    next_state: PomodoroState


class PomodoroTimer:
    """Work/break cycle driven by explicit ticks.

    Every phase change bumps ``generation``. A tick tagged with an older
    generation, or any tick after ``dispose()``, is ignored, so a stale tick
    source can never decrement a newer phase.
    """

    def __init__(
        self,
        config: PomodoroConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
        task_id: str | None = None,
    ) -> None:
        self._config = config or PomodoroConfig()
        self._clock = clock
        self._disposed = False
        self.generation = 0
        work = self._config.seconds_for(PomodoroState.WORK)
        self._session = PomodoroSession(
            state=PomodoroState.IDLE,
            duration=work,
            remaining_time=work,
            task_id=task_id,
        )

    # -- read access -------------------------------------------------------

    @property
    def config(self) -> PomodoroConfig:
        return self._config

    @property
    def session(self) -> PomodoroSession:
        return replace(self._session)

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def progress(self) -> float:
        return progress(self._session.duration, self._session.remaining_time)

    @property
    def clock_text(self) -> str:
        return format_clock(self._session.remaining_time)

    # -- user actions ------------------------------------------------------

    def start(self) -> PomodoroSession:
        s = self._session
        if self._disposed or s.is_active:
            return self.session
        if s.state == PomodoroState.IDLE:
            s.state = PomodoroState.WORK
        if not s.id:
            s.id = uuid.uuid4().hex
        if s.start_time is None:
            s.start_time = self._clock()
        s.is_active = True
        self.generation += 1
        logger.info("Pomodoro %s started (%ds left)", s.state.value, s.remaining_time)
        return self.session

    def pause(self) -> PomodoroSession:
        if self._session.is_active:
            self._session.is_active = False
            self.generation += 1
            logger.info("Pomodoro paused at %s", self.clock_text)
        return self.session

    def reset(self) -> PomodoroSession:
        s = self._session
        full = self._config.seconds_for(s.state)
        s.is_active = False
        s.duration = full
        s.remaining_time = full
        s.start_time = None
        self.generation += 1
        return self.session

    def skip(self) -> PhaseCompleted | None:
        """Finish the current phase now. Nothing to finish while Idle."""
        if self._disposed or self._session.state == PomodoroState.IDLE:
            return None
        return self._complete_phase()

    def dispose(self) -> None:
        self._session.is_active = False
        self._disposed = True
        self.generation += 1

    def tick(self, generation: int | None = None) -> PhaseCompleted | None:
        """Advance one second. Returns the completion event when the phase ends."""
        if self._disposed:
            logger.debug("Tick after dispose ignored")
            return None
        if generation is not None and generation != self.generation:
            logger.debug("Stale tick (gen %d, current %d) ignored", generation, self.generation)
            return None
        s = self._session
        if not s.is_active:
            return None

        s.remaining_time = max(0, s.remaining_time - 1)
        if s.remaining_time == 0:
            return self._complete_phase()
        return None

    # -- configuration -----------------------------------------------------

    def update_config(self, **changes) -> PomodoroConfig:
        """Apply configuration changes.

        Invalid values raise TimerConfigError and leave the previous
        configuration in place. While Idle the countdown is re-baselined to
        the new work duration; a running or paused phase keeps its countdown
        and only later phases pick up the new durations.
        """
        new_config = validate_config({**self._config.model_dump(), **changes})
        self._config = new_config
        s = self._session
        if s.state == PomodoroState.IDLE:
            work = new_config.seconds_for(PomodoroState.WORK)
            s.duration = work
            s.remaining_time = work
        return new_config

    # -- internals ---------------------------------------------------------

    def _next_state(self, finished: PomodoroState, completed: int) -> PomodoroState:
        if finished == PomodoroState.WORK:
            if completed % self._config.pomodoros_until_long_break == 0:
                return PomodoroState.LONG_BREAK
            return PomodoroState.SHORT_BREAK
        return PomodoroState.WORK

    def _complete_phase(self) -> PhaseCompleted:
        s = self._session
        finished = s.state
        completed = s.completed_pomodoros
        if finished == PomodoroState.WORK:
            completed += 1
        next_state = self._next_state(finished, completed)
        now = self._clock()

        event = PhaseCompleted(
            session_id=s.id,
            state=finished,
            duration=s.duration,
            start_time=s.start_time,
            end_time=now,
            task_id=s.task_id,
            completed_pomodoros=completed,
            next_state=next_state,
        )

        if next_state in _BREAKS:
            auto_start = self._config.auto_start_breaks
        else:
            auto_start = self._config.auto_start_work
        full = self._config.seconds_for(next_state)
        self._session = PomodoroSession(
            state=next_state,
            duration=full,
            remaining_time=full,
            is_active=auto_start,
            completed_pomodoros=completed,
            start_time=now if auto_start else None,
            task_id=s.task_id,
            id=uuid.uuid4().hex,
        )
        self.generation += 1
        logger.info(
            "Pomodoro %s complete (%d done), next: %s%s",
            finished.value, completed, next_state.value, "" if auto_start else " (paused)",
        )
        return event


def format_clock(seconds: int) -> str:
    """Render a countdown as MM:SS, or H:MM:SS once an hour or more remains."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def progress(duration: int, remaining: int) -> float:
    """Elapsed fraction of a phase, clamped to [0, 1]."""
    if duration <= 0:
        return 0.0
    return min(1.0, max(0.0, (duration - remaining) / duration))


def full_cycles(completed_pomodoros: int, pomodoros_until_long_break: int) -> int:
    return completed_pomodoros // pomodoros_until_long_break
