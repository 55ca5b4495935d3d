"""Datetime parsing helpers for booking requests."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from booking_api.core.exceptions import ValidationError

_EPOCH_MILLIS_THRESHOLD = 10**12


def to_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(raw_value: datetime | str | int | float | None, field: str) -> datetime:
    """
    Parse a request timestamp into an aware UTC datetime.

    Accepts datetimes, ISO 8601 strings (``Z`` suffix allowed) and epoch
    seconds/milliseconds.

    Raises:
        ValidationError: missing or unparseable value
    """
    if raw_value is None or raw_value == "":
        raise ValidationError(f"Missing required field: {field}")

    if isinstance(raw_value, datetime):
        return to_utc(raw_value)

    if isinstance(raw_value, (int, float)) and not isinstance(raw_value, bool):
        return _from_epoch(_epoch_seconds(raw_value), field)

    if not isinstance(raw_value, str):
        raise ValidationError(f"Invalid {field}")

    value = raw_value.strip()

    # Epoch timestamps (seconds or milliseconds)
    if re.fullmatch(r"\d{10,13}", value):
        return _from_epoch(_epoch_seconds(int(value)), field)

    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid {field}")
    return to_utc(dt)


def _epoch_seconds(ts: int | float) -> float:
    """Values of 13 or more digits are epoch milliseconds, smaller ones seconds."""
    if abs(ts) >= _EPOCH_MILLIS_THRESHOLD:
        return ts / 1000
    return ts


def _from_epoch(ts: int | float, field: str) -> datetime:
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise ValidationError(f"Invalid {field}")
