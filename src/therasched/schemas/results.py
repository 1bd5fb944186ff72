"""
@brief
Result types returned by the validation engine.

@details
Every check reports its outcome as a value: rejections are never raised.
`ErrorCode` carries the failure taxonomy and its translation to the HTTP
contract ({error, code} body plus status); `ForcePolicy` selects between the
strict and the override variant of a pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCategory(str, Enum):
    STRUCTURAL = "structural"  # unresolved ids, missing assignment, empty interval
    RESOURCE = "resource"  # double booking, working hours
    POLICY = "policy"  # forceable hard failures
    WARNING = "warning"  # confirmable soft failures


class ErrorCode(str, Enum):
    INVALID_TIME_RANGE = "InvalidTimeRange"
    NO_EMPLOYEE_ASSIGNED = "NoEmployeeAssigned"
    ROOM_NOT_FOUND = "RoomNotFound"
    EMPLOYEE_NOT_FOUND = "EmployeeNotFound"
    PATIENT_NOT_FOUND = "PatientNotFound"
    SESSION_NOT_FOUND = "SessionNotFound"
    NOT_WORKING_THIS_DAY = "NotWorkingThisDay"
    OUTSIDE_WORKING_HOURS = "OutsideWorkingHours"
    EMPLOYEE_BUSY = "EmployeeBusy"
    ROOM_BUSY = "RoomBusy"
    BLOCKING_PERIOD_OVERLAP = "BlockingPeriodOverlap"
    PATIENT_TIME_CONFLICT = "PatientTimeConflict"
    CONSECUTIVE_SESSIONS = "ConsecutiveSessions"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]

    @property
    def forceable(self) -> bool:
        return self.category in (ErrorCategory.POLICY, ErrorCategory.WARNING)

    @property
    def api_code(self) -> str:
        """Code name exposed in the JSON error body."""
        return _API_CODES.get(self, "SCHEDULE_CONSTRAINT_VIOLATION")

    @property
    def http_status(self) -> int:
        return 400 if self.category is ErrorCategory.STRUCTURAL else 409


_CATEGORIES: dict[ErrorCode, ErrorCategory] = {
    ErrorCode.INVALID_TIME_RANGE: ErrorCategory.STRUCTURAL,
    ErrorCode.NO_EMPLOYEE_ASSIGNED: ErrorCategory.STRUCTURAL,
    ErrorCode.ROOM_NOT_FOUND: ErrorCategory.STRUCTURAL,
    ErrorCode.EMPLOYEE_NOT_FOUND: ErrorCategory.STRUCTURAL,
    ErrorCode.PATIENT_NOT_FOUND: ErrorCategory.STRUCTURAL,
    ErrorCode.SESSION_NOT_FOUND: ErrorCategory.STRUCTURAL,
    ErrorCode.NOT_WORKING_THIS_DAY: ErrorCategory.RESOURCE,
    ErrorCode.OUTSIDE_WORKING_HOURS: ErrorCategory.RESOURCE,
    ErrorCode.EMPLOYEE_BUSY: ErrorCategory.RESOURCE,
    ErrorCode.ROOM_BUSY: ErrorCategory.RESOURCE,
    ErrorCode.BLOCKING_PERIOD_OVERLAP: ErrorCategory.POLICY,
    ErrorCode.PATIENT_TIME_CONFLICT: ErrorCategory.POLICY,
    ErrorCode.CONSECUTIVE_SESSIONS: ErrorCategory.WARNING,
}

_API_CODES: dict[ErrorCode, str] = {
    ErrorCode.BLOCKING_PERIOD_OVERLAP: "BLOCKING_ACTIVITY_OVERLAP",
    ErrorCode.PATIENT_TIME_CONFLICT: "PATIENT_TIME_CONFLICT",
    ErrorCode.CONSECUTIVE_SESSIONS: "CONSECUTIVE_SESSIONS_VIOLATION",
}


@dataclass(frozen=True)
class ForcePolicy:
    """
    Which forceable checks a pipeline may skip.

    force_create bypasses the blocking-period check of session placement.
    force_assign bypasses the patient time-conflict and consecutive-session checks.
    Structural and resource checks have no flag: they always run.
    """

    force_create: bool = False
    force_assign: bool = False

    @classmethod
    def override(cls) -> ForcePolicy:
        return cls(force_create=True, force_assign=True)


STRICT_POLICY = ForcePolicy()


class ValidationResult(BaseModel):
    """
    @brief
    Outcome of one validation call.

    @details
    `valid=False` with `is_warning=True` marks a soft failure: the caller may
    ask a human to confirm and retry with the force flag. All other failures
    are hard for the given policy.
    """

    model_config = {"frozen": True}

    valid: bool
    error_code: ErrorCode | None = None
    error_message: str | None = None
    is_warning: bool = False
    consecutive_count: int | None = None
    entity_id: str | None = Field(
        None, description="Employee, room, activity or patient the failure refers to"
    )
    patient_id: str | None = Field(None, description="Failing patient of a bulk assignment")
    conflicting_session_ids: tuple[str, ...] = ()

    @classmethod
    def ok(cls, consecutive_count: int | None = None) -> ValidationResult:
        return cls(valid=True, consecutive_count=consecutive_count)

    @classmethod
    def fail(
        cls,
        code: ErrorCode,
        message: str,
        *,
        entity_id: str | None = None,
        conflicting_session_ids: tuple[str, ...] = (),
        consecutive_count: int | None = None,
    ) -> ValidationResult:
        return cls(
            valid=False,
            error_code=code,
            error_message=message,
            is_warning=code.category is ErrorCategory.WARNING,
            entity_id=entity_id,
            conflicting_session_ids=tuple(conflicting_session_ids),
            consecutive_count=consecutive_count,
        )

    def to_response(self) -> tuple[int, dict[str, Any]]:
        """
        @brief
        Translate a failed result into the HTTP error contract.

        @returns
            (status, {"error": message, "code": api_code}); for a valid result
            (200, {"valid": True}) plus the consecutive count when known.
        """
        if self.valid or self.error_code is None:
            body: dict[str, Any] = {"valid": True}
            if self.consecutive_count is not None:
                body["consecutiveCount"] = self.consecutive_count
            return 200, body

        body = {"error": self.error_message, "code": self.error_code.api_code}
        if self.consecutive_count is not None:
            body["consecutiveCount"] = self.consecutive_count
        if self.patient_id is not None:
            body["patientId"] = self.patient_id
        return self.error_code.http_status, body


@dataclass(frozen=True)
class ConsecutiveCheck:
    """Outcome of the consecutive-session rule for one patient."""

    valid: bool
    consecutive_count: int
    warning: str | None = None


__all__ = [
    "ErrorCategory",
    "ErrorCode",
    "ForcePolicy",
    "STRICT_POLICY",
    "ValidationResult",
    "ConsecutiveCheck",
]
