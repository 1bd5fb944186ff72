# src/therasched/validator/timeutil.py
"""Wall-clock arithmetic on HH:mm strings (no dates, no timezones)."""

from __future__ import annotations

import re

from therasched.errors import DataError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

TimeLike = str | int


def to_minutes(value: str) -> int:
    """
    @brief
    Convert an HH:mm string into minutes since midnight.

    @params
        value : str
            Wall-clock time such as "09:45".

    @returns
        hours * 60 + minutes.

    @raises
        DataError
            If the value is not a well-formed HH:mm time.
    """
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise DataError(
            f"Invalid time value: {value!r}",
            source="timeutil.to_minutes",
            suggested_action="Use 24h HH:mm format, e.g. '09:45'.",
        )
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise DataError(
            f"Time out of range: {value!r}",
            source="timeutil.to_minutes",
            suggested_action="Hours must be 0-23 and minutes 0-59.",
        )
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Inverse of to_minutes, zero-padded."""
    if minutes < 0 or minutes >= 24 * 60:
        raise DataError(
            f"Minute offset out of range: {minutes}",
            source="timeutil.minutes_to_time",
            suggested_action="Pass a value within one day (0..1439).",
        )
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _as_minutes(value: TimeLike) -> int:
    # bool is an int subclass but never a minute offset
    if type(value) is int:
        return value
    return to_minutes(value)


def overlaps(start_a: TimeLike, end_a: TimeLike, start_b: TimeLike, end_b: TimeLike) -> bool:
    """
    @brief
    Strict half-open interval overlap test.

    @details
    True iff start_a < end_b and start_b < end_a. Touching intervals
    (end == start) do not overlap; zero-length intervals never overlap
    anything, themselves included. Accepts HH:mm strings or minute offsets.
    """
    a0, a1 = _as_minutes(start_a), _as_minutes(end_a)
    b0, b1 = _as_minutes(start_b), _as_minutes(end_b)
    # zero-length intervals are empty sets
    if a0 >= a1 or b0 >= b1:
        return False
    return a0 < b1 and b0 < a1


__all__ = ["to_minutes", "minutes_to_time", "overlaps"]
