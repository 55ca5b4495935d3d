"""Interval helpers for availability matching.

All wall-clock reads use UTC calendar fields; no tenant or staff time zone
is applied.
"""

from __future__ import annotations

import re
from datetime import datetime

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{1,2})\s*$")


def contains(
    outer_start: datetime, outer_end: datetime, start: datetime, end: datetime
) -> bool:
    """``[start, end]`` lies within ``[outer_start, outer_end]`` (inclusive)."""
    return outer_start <= start and end <= outer_end


def hhmm_to_minutes(value: str | None) -> int | None:
    """
    Parse "HH:MM" into minutes since midnight.

    Returns None for missing or malformed values so callers can treat the
    record as non-matching rather than failing. "24:00" is malformed: a
    window covering the end of the day ends at "23:59".
    """
    if not value:
        return None
    match = _HHMM_RE.match(value)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def minutes_since_midnight(value: datetime) -> int:
    return value.hour * 60 + value.minute


def day_of_week(value: datetime) -> int:
    """Day of week with 0=Sunday..6=Saturday."""
    return (value.weekday() + 1) % 7
