# src/therasched/validator/blocking.py
from __future__ import annotations

import logging
from collections.abc import Iterable

from therasched.schemas.models import Activity, TimeRange, WeekDay
from therasched.validator.timeutil import overlaps

logger = logging.getLogger(__name__)


def effective_window(activity: Activity, day: WeekDay) -> TimeRange | None:
    """
    @brief
    Resolve the window an activity occupies on a given weekday.

    @details
    Three-way resolution of the weekday override:
        override kind="window" -> the override window
        override kind="none"   -> no window that day (default suppressed)
        no override            -> the default window when both bounds are set
    """
    override = activity.day_overrides.get(WeekDay(day))
    if override is not None:
        return override.window if override.kind == "window" else None
    return activity.default_window


def find_blocking_overlaps(
    day: WeekDay, start_time: str, end_time: str, activities: Iterable[Activity]
) -> list[Activity]:
    """
    @brief
    List active blocking activities whose effective window intersects an interval.

    @details
    Non-blocking and inactive activities are informational and never returned.
    The check depends only on weekday and time, not on employees or rooms.

    @returns
        Blocking activities in input order; empty when the interval is free.
    """
    hits: list[Activity] = []
    for activity in activities:
        if not (activity.is_active and activity.is_blocking):
            continue
        window = effective_window(activity, day)
        if window is None:
            continue
        if overlaps(window.start_time, window.end_time, start_time, end_time):
            logger.debug(
                "Interval %s-%s on %s hits blocking period %s (%s-%s)",
                start_time,
                end_time,
                WeekDay(day).value,
                activity.id,
                window.start_time,
                window.end_time,
            )
            hits.append(activity)
    return hits


__all__ = ["effective_window", "find_blocking_overlaps"]
