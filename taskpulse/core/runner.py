"""
TaskPulse — Pomodoro Runner.

Drives a PomodoroTimer from an asyncio task ticking once per interval, and
routes each PhaseCompleted to the time entry store and the notifier.

Exactly one tick task exists at a time: every transition cancels the
previous task before arming the next, and each task only ticks the timer
generation it was armed for.

This module is provider-agnostic: it depends on NotificationPort and
TimeEntryPort protocols, not on specific implementations.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from taskpulse.core.pomodoro import PhaseCompleted, PomodoroSession, PomodoroState, PomodoroTimer
from taskpulse.core.time_tracking import session_to_time_entry

if TYPE_CHECKING:
    from taskpulse.ports.notification_port import NotificationPort
    from taskpulse.ports.time_entry_port import TimeEntryPort

logger = logging.getLogger(__name__)

WORK_DONE_MESSAGE = "Pomodoro complete! Time for a break 🎉"
BREAK_DONE_MESSAGE = "Break over! Ready to focus? 💪"


class PomodoroRunner:
    """Owns the tick task for one timer."""

    def __init__(
        self,
        timer: PomodoroTimer,
        notifier: NotificationPort | None = None,
        entry_store: TimeEntryPort | None = None,
        user_id: int | None = None,
        interval: float = 1.0,
        on_tick: Callable[[PomodoroSession], None] | None = None,
    ) -> None:
        self._timer = timer
        self._notifier = notifier
        self._entries = entry_store
        self._user_id = user_id
        self._interval = interval
        self._on_tick = on_tick
        self._task: asyncio.Task | None = None
        # Tick task that has detached itself to deliver a finished phase.
        self._completing: asyncio.Task | None = None
        self.completed: list[PhaseCompleted] = []

    @property
    def timer(self) -> PomodoroTimer:
        return self._timer

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # -- user actions ------------------------------------------------------

    def start(self) -> None:
        self._timer.start()
        self._arm()

    def pause(self) -> None:
        self._cancel()
        self._timer.pause()

    def reset(self) -> None:
        self._cancel()
        self._timer.reset()

    async def skip(self) -> PhaseCompleted | None:
        self._cancel()
        event = self._timer.skip()
        if event is not None:
            await self._handle_completed(event)
        self._arm()
        return event

    async def close(self) -> None:
        """Stop ticking and dispose of the timer."""
        task, completing = self._task, self._completing
        self._cancel()
        self._timer.dispose()
        for pending in (task, completing):
            if pending is None or pending is asyncio.current_task():
                continue
            try:
                await pending
            except asyncio.CancelledError:
                pass

    # -- tick task ---------------------------------------------------------

    def _cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _arm(self) -> None:
        self._cancel()
        if self._timer.disposed or not self._timer.session.is_active:
            return
        self._task = asyncio.create_task(self._tick_loop(self._timer.generation))

    async def _tick_loop(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if generation != self._timer.generation:
                return
            event = self._timer.tick(generation)
            if self._on_tick is not None:
                try:
                    self._on_tick(self._timer.session)
                except Exception as exc:
                    logger.error("Tick callback failed: %s", exc)
            if event is not None:
                # Detach before re-arming so the new phase gets its own task.
                self._task = None
                self._completing = asyncio.current_task()
                try:
                    await self._handle_completed(event)
                finally:
                    self._completing = None
                if self._task is None:
                    self._arm()
                return

    # -- sinks -------------------------------------------------------------

    async def _handle_completed(self, event: PhaseCompleted) -> None:
        self.completed.append(event)

        if self._entries is not None:
            entry = session_to_time_entry(event)
            if entry is not None:
                try:
                    self._entries.add_entry(entry, user_id=self._user_id)
                except Exception as exc:
                    logger.error("Failed to store time entry for task %s: %s", event.task_id, exc)

        if self._notifier is not None and self._timer.config.show_notifications:
            text = WORK_DONE_MESSAGE if event.state == PomodoroState.WORK else BREAK_DONE_MESSAGE
            try:
                await self._notifier.send_message(self._user_id, text)
            except Exception as exc:
                logger.error("Failed to send Pomodoro notification: %s", exc)
