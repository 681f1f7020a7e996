"""
TaskPulse — Entry Point.

Single entry point: `python main.py` starts a terminal Pomodoro session.
"""

import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from taskpulse.cli import main

if __name__ == "__main__":
    sys.exit(main())
