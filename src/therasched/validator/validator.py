# src/therasched/validator/validator.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from therasched.schemas.models import EngineConfig, ScheduleScope, Session, SessionUpdate
from therasched.schemas.results import (
    STRICT_POLICY,
    ErrorCode,
    ForcePolicy,
    ValidationResult,
)
from therasched.schedule.lifecycle import find_session
from therasched.validator.availability import check_working_hours
from therasched.validator.blocking import find_blocking_overlaps
from therasched.validator.conflicts import (
    employee_conflicts,
    patient_conflicts,
    room_conflicts,
    same_schedule,
)
from therasched.validator.consecutive import check_consecutive_sessions
from therasched.validator.messages import render
from therasched.validator.timeutil import to_minutes

logger = logging.getLogger(__name__)

Check = Callable[[], "ValidationResult | None"]


def _run_pipeline(name: str, checks: Iterable[Check]) -> ValidationResult | None:
    """
    @brief
    Run checks in order and stop at the first failure.

    @returns
        The first failing result, or None when every check passed.
    """
    for check in checks:
        result = check()
        if result is not None:
            logger.info(
                "%s rejected: %s (%s)",
                name,
                result.error_code.value if result.error_code else "unknown",
                result.entity_id or "-",
            )
            return result
    return None


# ---------------------------
# SESSION PLACEMENT
# ----------------------------
class PlacementValidator:
    """
    @brief
    Validates the placement of one session in a schedule.

    @details
    Fixed pipeline, first failure wins:
        (0) end after start                       INVALID_TIME_RANGE
        (1) at least one employee assigned        NO_EMPLOYEE_ASSIGNED
        (2) room resolves                         ROOM_NOT_FOUND
        (3) per employee: resolves, works then,   EMPLOYEE_NOT_FOUND / NOT_WORKING_THIS_DAY /
            is not already booked                 OUTSIDE_WORKING_HOURS / EMPLOYEE_BUSY
        (4) room not already booked               ROOM_BUSY
        (5) no blocking period (skipped by force) BLOCKING_PERIOD_OVERLAP
    Steps (0)-(4) cannot be forced: double-booking a person or a room is
    never permitted.
    """

    def __init__(
        self, candidate: Session, scope: ScheduleScope, cfg: EngineConfig | None = None
    ) -> None:
        self.candidate = candidate
        self.scope = scope
        self.cfg = cfg or EngineConfig()

    def run(self, policy: ForcePolicy = STRICT_POLICY) -> ValidationResult:
        checks: list[Check] = [
            self._check_time_range,
            self._check_employee_assigned,
            self._check_room_exists,
            self._check_employees,
            self._check_room_conflicts,
        ]
        if not policy.force_create:
            checks.append(self._check_blocking_periods)

        failure = _run_pipeline(f"Placement of session {self.candidate.id}", checks)
        return failure or ValidationResult.ok()

    # ---------- Checks ----------
    def _check_time_range(self) -> ValidationResult | None:
        c = self.candidate
        if to_minutes(c.start_time) >= to_minutes(c.end_time):
            return ValidationResult.fail(
                ErrorCode.INVALID_TIME_RANGE,
                render(
                    ErrorCode.INVALID_TIME_RANGE,
                    self.cfg.locale,
                    start=c.start_time,
                    end=c.end_time,
                ),
            )
        return None

    def _check_employee_assigned(self) -> ValidationResult | None:
        if not self.candidate.employee_ids:
            return ValidationResult.fail(
                ErrorCode.NO_EMPLOYEE_ASSIGNED,
                render(ErrorCode.NO_EMPLOYEE_ASSIGNED, self.cfg.locale),
            )
        return None

    def _check_room_exists(self) -> ValidationResult | None:
        room_id = self.candidate.room_id
        if room_id not in self.scope.rooms_by_id:
            return ValidationResult.fail(
                ErrorCode.ROOM_NOT_FOUND,
                render(ErrorCode.ROOM_NOT_FOUND, self.cfg.locale, room_id=room_id),
                entity_id=room_id,
            )
        return None

    def _check_employees(self) -> ValidationResult | None:
        c = self.candidate
        for employee_id in c.employee_ids:
            # (1) Resolve employee
            employee = self.scope.employees_by_id.get(employee_id)
            if employee is None:
                return ValidationResult.fail(
                    ErrorCode.EMPLOYEE_NOT_FOUND,
                    render(ErrorCode.EMPLOYEE_NOT_FOUND, self.cfg.locale, employee_id=employee_id),
                    entity_id=employee_id,
                )

            # (2) Working hours
            availability = check_working_hours(
                employee, c.day, c.start_time, c.end_time, locale=self.cfg.locale
            )
            if not availability.valid:
                return availability

            # (3) Double booking
            busy = employee_conflicts(c, self.scope.sessions, employee_id)
            if busy:
                return ValidationResult.fail(
                    ErrorCode.EMPLOYEE_BUSY,
                    render(ErrorCode.EMPLOYEE_BUSY, self.cfg.locale, employee_id=employee_id),
                    entity_id=employee_id,
                    conflicting_session_ids=tuple(s.id for s in busy),
                )
        return None

    def _check_room_conflicts(self) -> ValidationResult | None:
        busy = room_conflicts(self.candidate, self.scope.sessions)
        if busy:
            room_id = self.candidate.room_id
            return ValidationResult.fail(
                ErrorCode.ROOM_BUSY,
                render(ErrorCode.ROOM_BUSY, self.cfg.locale, room_id=room_id),
                entity_id=room_id,
                conflicting_session_ids=tuple(s.id for s in busy),
            )
        return None

    def _check_blocking_periods(self) -> ValidationResult | None:
        c = self.candidate
        hits = find_blocking_overlaps(c.day, c.start_time, c.end_time, self.scope.activities)
        if hits:
            period = hits[0]
            return ValidationResult.fail(
                ErrorCode.BLOCKING_PERIOD_OVERLAP,
                render(
                    ErrorCode.BLOCKING_PERIOD_OVERLAP,
                    self.cfg.locale,
                    period=period.name or period.id,
                ),
                entity_id=period.id,
            )
        return None


# ---------------------------
# PATIENT ASSIGNMENT
# ----------------------------
class PatientAssignmentValidator:
    """
    @brief
    Validates adding one patient to an existing session.

    @details
    Pipeline:
        (0) patient resolves, when the scope carries a patient catalog
        (1) patient not already in an overlapping session    PATIENT_TIME_CONFLICT
        (2) consecutive chain within the configured maximum  CONSECUTIVE_SESSIONS (soft)
    Steps (1) and (2) are skipped entirely under force_assign.
    """

    def __init__(
        self,
        patient_id: str,
        session: Session,
        scope: ScheduleScope,
        cfg: EngineConfig | None = None,
    ) -> None:
        self.patient_id = patient_id
        self.session = session
        self.scope = scope
        self.cfg = cfg or EngineConfig()
        self._consecutive_count: int | None = None

    def run(self, policy: ForcePolicy = STRICT_POLICY) -> ValidationResult:
        checks: list[Check] = [self._check_patient_exists]
        if not policy.force_assign:
            checks += [self._check_time_conflicts, self._check_consecutive]

        failure = _run_pipeline(
            f"Assignment of patient {self.patient_id} to session {self.session.id}", checks
        )
        return failure or ValidationResult.ok(consecutive_count=self._consecutive_count)

    def _patient_sessions(self) -> list[Session]:
        return [
            s
            for s in self.scope.sessions
            if self.patient_id in s.patient_ids and same_schedule(s, self.session)
        ]

    # ---------- Checks ----------
    def _check_patient_exists(self) -> ValidationResult | None:
        catalog = self.scope.patients_by_id
        if catalog is not None and self.patient_id not in catalog:
            return ValidationResult.fail(
                ErrorCode.PATIENT_NOT_FOUND,
                render(ErrorCode.PATIENT_NOT_FOUND, self.cfg.locale, patient_id=self.patient_id),
                entity_id=self.patient_id,
            )
        return None

    def _check_time_conflicts(self) -> ValidationResult | None:
        busy = patient_conflicts(self.session, self.scope.sessions, self.patient_id)
        if busy:
            return ValidationResult.fail(
                ErrorCode.PATIENT_TIME_CONFLICT,
                render(
                    ErrorCode.PATIENT_TIME_CONFLICT, self.cfg.locale, patient_id=self.patient_id
                ),
                entity_id=self.patient_id,
                conflicting_session_ids=tuple(s.id for s in busy),
            )
        return None

    def _check_consecutive(self) -> ValidationResult | None:
        outcome = check_consecutive_sessions(
            self.patient_id,
            self.session,
            self._patient_sessions(),
            break_minutes=self.cfg.consecutive_break_minutes,
            max_consecutive=self.cfg.max_consecutive_sessions,
            locale=self.cfg.locale,
        )
        self._consecutive_count = outcome.consecutive_count
        if not outcome.valid:
            return ValidationResult.fail(
                ErrorCode.CONSECUTIVE_SESSIONS,
                outcome.warning or "",
                entity_id=self.patient_id,
                consecutive_count=outcome.consecutive_count,
            )
        return None


# ----------------------------
# THIN FACADES
# ----------------------------
def validate_session_placement(
    candidate: Session,
    scope: ScheduleScope,
    force_create: bool = False,
    cfg: EngineConfig | None = None,
) -> ValidationResult:
    """
    @brief
    Decide whether a session may be created in the scope's schedule.

    @details
    `force_create` only bypasses the blocking-period check.

    @returns
        ValidationResult with valid, error_code and error_message.
    """
    return PlacementValidator(candidate, scope, cfg).run(ForcePolicy(force_create=force_create))


def validate_patient_assignment(
    patient_id: str,
    session: Session,
    scope: ScheduleScope,
    force_assign: bool = False,
    cfg: EngineConfig | None = None,
) -> ValidationResult:
    """
    @brief
    Decide whether a patient may join a session.

    @details
    A CONSECUTIVE_SESSIONS failure is soft (is_warning=True); the caller should
    ask for confirmation and retry with `force_assign=True`.
    """
    validator = PatientAssignmentValidator(patient_id, session, scope, cfg)
    return validator.run(ForcePolicy(force_assign=force_assign))


def validate_patient_update(
    session_id: str,
    patient_ids: Iterable[str],
    scope: ScheduleScope,
    force_assign: bool = False,
    cfg: EngineConfig | None = None,
) -> ValidationResult:
    """
    @brief
    Validate replacing a session's patient list.

    @details
    Runs the patient-assignment pipeline once per newly added patient, in the
    given order. Patients already on the session are skipped so an existing
    assignment is never reported as conflicting with itself. Removals need no
    validation. Stops at the first failing patient and reports its id.
    """
    cfg = cfg or EngineConfig()
    session = find_session(scope.sessions, session_id)
    if session is None:
        return ValidationResult.fail(
            ErrorCode.SESSION_NOT_FOUND,
            render(ErrorCode.SESSION_NOT_FOUND, cfg.locale, session_id=session_id),
            entity_id=session_id,
        )

    policy = ForcePolicy(force_assign=force_assign)
    added = [pid for pid in dict.fromkeys(patient_ids) if pid not in session.patient_ids]
    logger.debug("Session %s: %d new patient(s) to validate", session_id, len(added))

    for patient_id in added:
        result = PatientAssignmentValidator(patient_id, session, scope, cfg).run(policy)
        if not result.valid:
            return result.model_copy(update={"patient_id": patient_id})
    return ValidationResult.ok()


def validate_session_update(
    session_id: str,
    update: SessionUpdate,
    scope: ScheduleScope,
    force_create: bool = False,
    cfg: EngineConfig | None = None,
) -> ValidationResult:
    """
    @brief
    Validate editing an existing session.

    @details
    Merges the update onto the persisted session and runs the placement
    pipeline on the result; the session's own id is excluded from conflict
    search. Updates that change none of day, times, employees or room are
    accepted without running the pipeline.
    """
    cfg = cfg or EngineConfig()
    current = find_session(scope.sessions, session_id)
    if current is None:
        return ValidationResult.fail(
            ErrorCode.SESSION_NOT_FOUND,
            render(ErrorCode.SESSION_NOT_FOUND, cfg.locale, session_id=session_id),
            entity_id=session_id,
        )
    if not update.touches_placement():
        return ValidationResult.ok()
    return validate_session_placement(update.apply_to(current), scope, force_create, cfg)


__all__ = [
    "PlacementValidator",
    "PatientAssignmentValidator",
    "validate_session_placement",
    "validate_patient_assignment",
    "validate_patient_update",
    "validate_session_update",
]
