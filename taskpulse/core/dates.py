"""Lenient ISO date/time parsing shared by the productivity tools.

Task records come from a hosted database and may carry empty or malformed
values. Every parser here returns None instead of raising so one bad record
never breaks a pass over the whole collection.
"""

from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(raw: str | None) -> date | None:
    """Parse YYYY-MM-DD (a trailing time part is ignored)."""
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip()[:10])
    except (ValueError, TypeError, AttributeError):
        return None


def parse_iso_timestamp(raw: str | None, like: datetime | None = None) -> datetime | None:
    """Parse an ISO timestamp, accepting a trailing "Z".

    When ``like`` is given, the result is made comparable with it: an aware
    value is converted to naive local time for a naive ``like``, and a naive
    value borrows the timezone of an aware ``like``.
    """
    if not raw:
        return None
    try:
        text = raw.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    except (ValueError, TypeError, AttributeError):
        return None

    if like is not None:
        if parsed.tzinfo is not None and like.tzinfo is None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        elif parsed.tzinfo is None and like.tzinfo is not None:
            parsed = parsed.replace(tzinfo=like.tzinfo)
    return parsed


def hhmm_to_minutes(raw: str) -> int:
    """Convert "HH:MM" to minutes from midnight.

    Raises ValueError on malformed input.
    """
    parts = raw.strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"Expected HH:MM, got {raw!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Hour/minute out of range: {raw!r}")
    return hour * 60 + minute


def minutes_to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
