# src/therasched/schedule/lifecycle.py
"""
Schedule container rules and session lookups.

At most one schedule is active at a time: adding or activating a schedule
deactivates every other one. Functions return new snapshots and never
mutate their inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from therasched.errors import DataError
from therasched.schemas.models import Schedule, Session, WeekDay

logger = logging.getLogger(__name__)


def activate_schedule(schedules: Iterable[Schedule], schedule_id: str) -> list[Schedule]:
    """
    @brief
    Mark one schedule active and every other schedule inactive.

    @raises
        DataError
            If no schedule has the given id.
    """
    items = list(schedules)
    if not any(s.id == schedule_id for s in items):
        raise DataError(
            f"Schedule not found: {schedule_id}",
            source="lifecycle.activate_schedule",
            suggested_action="Pass the id of an existing schedule.",
        )
    logger.info("Activating schedule %s (%d schedule(s) total)", schedule_id, len(items))
    return [s.model_copy(update={"is_active": s.id == schedule_id}) for s in items]


def add_schedule(schedules: Iterable[Schedule], new: Schedule) -> list[Schedule]:
    """Append a new schedule as the active one."""
    items = list(schedules)
    if any(s.id == new.id for s in items):
        raise DataError(
            f"Duplicate schedule id: {new.id}",
            source="lifecycle.add_schedule",
            suggested_action="Schedule ids must be unique.",
        )
    return activate_schedule([*items, new], new.id)


def active_schedule(schedules: Iterable[Schedule]) -> Schedule | None:
    for s in schedules:
        if s.is_active:
            return s
    return None


def sessions_in_schedule(sessions: Iterable[Session], schedule_id: str) -> list[Session]:
    return [s for s in sessions if s.schedule_id == schedule_id]


def sessions_for_patient(
    sessions: Iterable[Session], patient_id: str, day: WeekDay | None = None
) -> list[Session]:
    """Sessions a patient is assigned to, optionally restricted to one weekday."""
    return [
        s
        for s in sessions
        if patient_id in s.patient_ids and (day is None or s.day == WeekDay(day))
    ]


def sessions_for_employee(sessions: Iterable[Session], employee_id: str) -> list[Session]:
    return [s for s in sessions if employee_id in s.employee_ids]


def find_session(sessions: Iterable[Session], session_id: str) -> Session | None:
    return next((s for s in sessions if s.id == session_id), None)


__all__ = [
    "activate_schedule",
    "add_schedule",
    "active_schedule",
    "sessions_in_schedule",
    "sessions_for_patient",
    "sessions_for_employee",
    "find_session",
]
