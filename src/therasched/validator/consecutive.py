# src/therasched/validator/consecutive.py
from __future__ import annotations

import logging
from collections.abc import Iterable

from therasched.errors import DataError
from therasched.schemas.models import Session
from therasched.schemas.results import ConsecutiveCheck, ErrorCode
from therasched.validator.messages import DEFAULT_LOCALE, render
from therasched.validator.timeutil import to_minutes

logger = logging.getLogger(__name__)

DEFAULT_BREAK_MINUTES = 15
DEFAULT_MAX_CONSECUTIVE = 2


def count_consecutive_sessions(
    candidate: Session,
    patient_sessions: Iterable[Session],
    break_minutes: int = DEFAULT_BREAK_MINUTES,
) -> int:
    """
    @brief
    Length of the back-to-back chain a candidate session would belong to.

    @details
    Merges the candidate into the patient's other sessions of the same weekday
    and sorts by start time (stable, the candidate goes after equal starts).
    Starting from 1 for the candidate, walks backward while
    `current.start - previous.end < break_minutes`, then walks forward from
    the candidate while `next.start - current.end < break_minutes`.
    The two walks are independent: a break on one side does not stop
    counting on the other. A gap of exactly `break_minutes` is a break;
    a gap of 0 is consecutive.

    @params
        candidate : Session
            Session the patient is being assigned to.
        patient_sessions : Iterable[Session]
            Other sessions of the same patient; other weekdays and the
            candidate's own id are ignored.
        break_minutes : int
            Smallest gap that separates two sessions.

    @returns
        Chain length including the candidate (>= 1).
    """
    # (1) Merge same-day sessions with the candidate and order them
    merged = [s for s in patient_sessions if s.day == candidate.day and s.id != candidate.id]
    merged.append(candidate)
    merged.sort(key=lambda s: to_minutes(s.start_time))

    position = next(i for i, s in enumerate(merged) if s.id == candidate.id)
    count = 1

    # (2) Backward walk
    cursor = position
    while cursor > 0:
        gap = to_minutes(merged[cursor].start_time) - to_minutes(merged[cursor - 1].end_time)
        if gap >= break_minutes:
            break
        count += 1
        cursor -= 1

    # (3) Forward walk, independent of the backward one
    cursor = position
    while cursor < len(merged) - 1:
        gap = to_minutes(merged[cursor + 1].start_time) - to_minutes(merged[cursor].end_time)
        if gap >= break_minutes:
            break
        count += 1
        cursor += 1

    return count


def check_consecutive_sessions(
    patient_id: str,
    candidate: Session,
    patient_sessions: Iterable[Session],
    *,
    break_minutes: int = DEFAULT_BREAK_MINUTES,
    max_consecutive: int = DEFAULT_MAX_CONSECUTIVE,
    locale: str = DEFAULT_LOCALE,
) -> ConsecutiveCheck:
    """
    @brief
    Apply the consecutive-session rule for one patient.

    @details
    A chain longer than `max_consecutive` yields valid=False with a localized
    warning. This is a soft failure: the caller is expected to ask for
    confirmation and retry with the force flag rather than reject outright.

    @raises
        DataError
            If the patient id, session id, day or times are missing.
    """
    if not (
        patient_id
        and candidate.id
        and candidate.day
        and candidate.start_time
        and candidate.end_time
    ):
        raise DataError(
            "Missing required parameters for patient consecutive sessions validation",
            source="consecutive.check_consecutive_sessions",
            suggested_action="Provide patient id, session id, day, start and end time.",
        )

    count = count_consecutive_sessions(candidate, patient_sessions, break_minutes)
    logger.debug("Patient %s would have %d consecutive session(s)", patient_id, count)

    if count > max_consecutive:
        return ConsecutiveCheck(
            valid=False,
            consecutive_count=count,
            warning=render(ErrorCode.CONSECUTIVE_SESSIONS, locale, count=count),
        )
    return ConsecutiveCheck(valid=True, consecutive_count=count)


__all__ = [
    "DEFAULT_BREAK_MINUTES",
    "DEFAULT_MAX_CONSECUTIVE",
    "count_consecutive_sessions",
    "check_consecutive_sessions",
]
