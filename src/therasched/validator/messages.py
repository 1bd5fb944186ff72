# src/therasched/validator/messages.py
from __future__ import annotations

from typing import Any

from therasched.schemas.results import ErrorCode

DEFAULT_LOCALE = "he"

# Placeholders are filled with str.format; unused keyword arguments are ignored.
_CATALOG: dict[str, dict[ErrorCode, str]] = {
    "he": {
        ErrorCode.INVALID_TIME_RANGE: "שעת הסיום חייבת להיות אחרי שעת ההתחלה",
        ErrorCode.NO_EMPLOYEE_ASSIGNED: "יש לשבץ לפחות עובד אחד לטיפול",
        ErrorCode.ROOM_NOT_FOUND: "חדר לא נמצא",
        ErrorCode.EMPLOYEE_NOT_FOUND: "עובד לא נמצא",
        ErrorCode.PATIENT_NOT_FOUND: "מטופל לא נמצא",
        ErrorCode.SESSION_NOT_FOUND: "טיפול לא נמצא",
        ErrorCode.NOT_WORKING_THIS_DAY: "העובד לא עובד ביום זה",
        ErrorCode.OUTSIDE_WORKING_HOURS: "הטיפול מחוץ לשעות העבודה של העובד",
        ErrorCode.EMPLOYEE_BUSY: "העובד תפוס בזמן זה",
        ErrorCode.ROOM_BUSY: "החדר תפוס בזמן זה",
        ErrorCode.BLOCKING_PERIOD_OVERLAP: "לא ניתן לתזמן טיפול בזמן פעילות חוסמת ({period})",
        ErrorCode.PATIENT_TIME_CONFLICT: "למטופל כבר יש טיפול בזמן זה",
        ErrorCode.CONSECUTIVE_SESSIONS: (
            "המטופל יהיה עם {count} טיפולים רצופים ללא הפסקה. "
            "האם אתה בטוח שברצונך להמשיך?"
        ),
    },
    "en": {
        ErrorCode.INVALID_TIME_RANGE: "Session end time {end} must be after start time {start}",
        ErrorCode.NO_EMPLOYEE_ASSIGNED: "At least one employee must be assigned to the session",
        ErrorCode.ROOM_NOT_FOUND: "Room {room_id} not found",
        ErrorCode.EMPLOYEE_NOT_FOUND: "Employee {employee_id} not found",
        ErrorCode.PATIENT_NOT_FOUND: "Patient {patient_id} not found",
        ErrorCode.SESSION_NOT_FOUND: "Session {session_id} not found",
        ErrorCode.NOT_WORKING_THIS_DAY: "Employee {employee_id} does not work on {day}",
        ErrorCode.OUTSIDE_WORKING_HOURS: (
            "Session {start}-{end} is outside the working hours of employee "
            "{employee_id} ({window_start}-{window_end})"
        ),
        ErrorCode.EMPLOYEE_BUSY: "Employee {employee_id} is busy at this time",
        ErrorCode.ROOM_BUSY: "Room {room_id} is occupied at this time",
        ErrorCode.BLOCKING_PERIOD_OVERLAP: "Session overlaps blocking period {period}",
        ErrorCode.PATIENT_TIME_CONFLICT: "Patient {patient_id} already has a session at this time",
        ErrorCode.CONSECUTIVE_SESSIONS: (
            "Patient will have {count} consecutive sessions without a break. "
            "Are you sure you want to continue?"
        ),
    },
}


def render(code: ErrorCode, locale: str = DEFAULT_LOCALE, **params: Any) -> str:
    """
    @brief
    Render the user-facing message for an error code.

    @details
    Falls back to the default locale for unknown languages. Missing
    placeholders render as "?" rather than failing the validation call.
    """
    catalog = _CATALOG.get(locale) or _CATALOG[DEFAULT_LOCALE]
    return catalog[code].format_map(_Defaulting(params))


class _Defaulting(dict):
    def __missing__(self, key: str) -> str:
        return "?"


__all__ = ["render", "DEFAULT_LOCALE"]
