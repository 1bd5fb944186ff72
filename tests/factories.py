# tests/factories.py
from __future__ import annotations

from therasched.schemas.models import (
    WEEK_DAYS,
    Activity,
    DayOverride,
    Employee,
    Patient,
    Role,
    Room,
    ScheduleScope,
    Session,
    TimeRange,
)


# -----------------------------
# HELPER FACTORIES
# -----------------------------
def mk_employee(
    eid: str = "E1",
    hours: dict[str, tuple[str, str]] | None = None,
    role_id: str | None = None,
    weekly: int = 0,
) -> Employee:
    """
    @brief
    Employee working 08:00-16:00 Sunday to Thursday unless `hours` says otherwise.

    @params
        hours : dict[str, tuple[str, str]] | None
            Weekday -> (start, end); days left out are days off.
    """
    if hours is None:
        hours = {d.value: ("08:00", "16:00") for d in WEEK_DAYS}
    return Employee(
        id=eid,
        working_hours={d: TimeRange(start_time=s, end_time=e) for d, (s, e) in hours.items()},
        role_id=role_id,
        weekly_sessions_count=weekly,
    )


def mk_room(rid: str = "R1") -> Room:
    return Room(id=rid)


def mk_session(
    sid: str,
    start: str,
    end: str,
    *,
    day: str = "sunday",
    employees: tuple[str, ...] = ("E1",),
    room: str = "R1",
    patients: tuple[str, ...] = (),
    schedule: str | None = "SCH1",
    every_two_weeks: bool = False,
) -> Session:
    return Session(
        id=sid,
        schedule_id=schedule,
        day=day,
        start_time=start,
        end_time=end,
        employee_ids=employees,
        room_id=room,
        patient_ids=patients,
        every_two_weeks=every_two_weeks,
    )


def mk_blocking(
    aid: str = "A1",
    start: str | None = "12:00",
    end: str | None = "13:00",
    *,
    name: str = "Staff meeting",
    overrides: dict[str, DayOverride] | None = None,
    blocking: bool = True,
    active: bool = True,
) -> Activity:
    return Activity(
        id=aid,
        name=name,
        is_blocking=blocking,
        is_active=active,
        default_start_time=start,
        default_end_time=end,
        day_overrides=overrides or {},
    )


def mk_patient(pid: str = "P1", requirements: dict[str, int] | None = None) -> Patient:
    return Patient(id=pid, therapy_requirements=requirements or {})


def mk_role(rid: str, key: str) -> Role:
    return Role(id=rid, name=key.title(), role_string_key=key)


def mk_scope(
    sessions: tuple[Session, ...] = (),
    *,
    employees: tuple[Employee, ...] | None = None,
    rooms: tuple[Room, ...] | None = None,
    activities: tuple[Activity, ...] = (),
    patients: tuple[Patient, ...] | None = None,
) -> ScheduleScope:
    """Scope with one default employee E1 and room R1 unless overridden."""
    return ScheduleScope(
        employees=employees if employees is not None else (mk_employee(),),
        rooms=rooms if rooms is not None else (mk_room(),),
        activities=activities,
        sessions=sessions,
        patients=patients,
    )
