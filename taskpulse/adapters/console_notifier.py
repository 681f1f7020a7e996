"""Console notification adapter — implements NotificationPort.

Writes notifications to a text stream (stdout by default).
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """Terminal implementation of NotificationPort."""

    def __init__(self, stream: TextIO | None = None, title: str = "TaskPulse") -> None:
        self._stream = stream or sys.stdout
        self._title = title

    async def send_message(self, user_id: int | None, text: str) -> None:
        self._stream.write(f"\n[{self._title}] {text}\n")
        self._stream.flush()
        logger.debug("Notification shown for user %s", user_id)
