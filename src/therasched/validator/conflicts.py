# src/therasched/validator/conflicts.py
"""
Overlap search between a candidate session and the sessions of its schedule.

All three instantiations share `find_conflicts`; they differ only in which
resource two sessions must share to collide.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from therasched.schemas.models import Session
from therasched.validator.timeutil import overlaps

SessionPredicate = Callable[[Session], bool]


def same_schedule(a: Session, b: Session) -> bool:
    # Sessions without a schedule id are taken to belong to the supplied snapshot
    if a.schedule_id is None or b.schedule_id is None:
        return True
    return a.schedule_id == b.schedule_id


def find_conflicts(
    candidate: Session, existing: Iterable[Session], match: SessionPredicate
) -> list[Session]:
    """
    @brief
    Return the existing sessions that collide with the candidate.

    @details
    A session collides when it satisfies `match`, is not the candidate itself
    (same id), belongs to the same schedule, falls on the same weekday and
    overlaps the candidate's half-open time interval.

    @params
        candidate : Session
            Session being placed or edited.
        existing : Iterable[Session]
            Sessions currently persisted in the target schedule.
        match : Callable[[Session], bool]
            Resource predicate (shares employee, room, patient, ...).

    @returns
        Conflicting sessions in input order.
    """
    return [
        s
        for s in existing
        if match(s)
        and s.id != candidate.id
        and same_schedule(s, candidate)
        and s.day == candidate.day
        and overlaps(s.start_time, s.end_time, candidate.start_time, candidate.end_time)
    ]


def employee_conflicts(
    candidate: Session, existing: Iterable[Session], employee_id: str
) -> list[Session]:
    return find_conflicts(candidate, existing, lambda s: employee_id in s.employee_ids)


def room_conflicts(candidate: Session, existing: Iterable[Session]) -> list[Session]:
    return find_conflicts(candidate, existing, lambda s: s.room_id == candidate.room_id)


def patient_conflicts(
    candidate: Session, existing: Iterable[Session], patient_id: str
) -> list[Session]:
    return find_conflicts(candidate, existing, lambda s: patient_id in s.patient_ids)


__all__ = [
    "same_schedule",
    "find_conflicts",
    "employee_conflicts",
    "room_conflicts",
    "patient_conflicts",
]
