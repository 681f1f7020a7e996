"""
TaskPulse — Terminal focus session.

Runs Pomodoro phases in the terminal, recording finished phases as time
entries in the local database.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from taskpulse.adapters.console_notifier import ConsoleNotifier
from taskpulse.config import settings
from taskpulse.core.pomodoro import (
    PomodoroSession,
    PomodoroState,
    PomodoroTimer,
    TimerConfigError,
    format_clock,
)
from taskpulse.core.runner import PomodoroRunner
from taskpulse.data.db import SettingsDB, TimeEntryDB

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskpulse", description="Run a Pomodoro focus session.")
    parser.add_argument("--task-id", help="task the work phases are logged against")
    parser.add_argument("--user-id", type=int, default=0, help="whose timer settings to use")
    parser.add_argument(
        "--cycles", type=int, default=1,
        help="number of work phases to run before stopping (default: 1)",
    )
    return parser


def _print_tick(session: PomodoroSession) -> None:
    sys.stdout.write(f"\r{session.state.value:>11}  {format_clock(session.remaining_time)}")
    sys.stdout.flush()


async def run_focus_session(task_id: str | None, user_id: int, cycles: int) -> int:
    """Run ``cycles`` work phases (with their breaks). Returns an exit code."""
    try:
        config = SettingsDB().load(user_id)
    except TimerConfigError as exc:
        logger.error("Invalid timer settings: %s", exc)
        return 1

    timer = PomodoroTimer(config, task_id=task_id)
    runner = PomodoroRunner(
        timer,
        notifier=ConsoleNotifier(),
        entry_store=TimeEntryDB(),
        user_id=user_id,
        on_tick=_print_tick,
    )

    try:
        while True:
            session = timer.session
            # Done once the break after the last work phase is over.
            if session.completed_pomodoros >= cycles and session.state == PomodoroState.WORK:
                break
            if not session.is_active:
                runner.start()
            await asyncio.sleep(_POLL_SECONDS)
    finally:
        await runner.close()
    sys.stdout.write("\n")
    logger.info("Focus session finished: %d pomodoros", timer.session.completed_pomodoros)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.cycles <= 0:
        logger.error("--cycles must be positive")
        return 2
    logging.getLogger().setLevel(settings.LOG_LEVEL)
    try:
        return asyncio.run(run_focus_session(args.task_id, args.user_id, args.cycles))
    except KeyboardInterrupt:
        sys.stdout.write("\n")
        return 130
