# src/therasched/validator/availability.py
from __future__ import annotations

import logging

from therasched.schemas.models import Employee, WeekDay
from therasched.schemas.results import ErrorCode, ValidationResult
from therasched.validator.messages import DEFAULT_LOCALE, render
from therasched.validator.timeutil import to_minutes

logger = logging.getLogger(__name__)


def check_working_hours(
    employee: Employee,
    day: WeekDay,
    start_time: str,
    end_time: str,
    *,
    locale: str = DEFAULT_LOCALE,
) -> ValidationResult:
    """
    @brief
    Verify that a session interval lies within an employee's working hours.

    @details
    Looks up the employee's window for the weekday. No window means the
    employee does not work that day. The session must start no earlier and
    end no later than the window; touching either bound is allowed.

    @params
        employee : Employee
            Employee assigned to the session.
        day : WeekDay
            Weekday of the session.
        start_time, end_time : str
            Session bounds (HH:mm).
        locale : str
            Language of the failure message.

    @returns
        ValidationResult.ok() or a failure with NOT_WORKING_THIS_DAY /
        OUTSIDE_WORKING_HOURS naming the employee.
    """
    window = employee.working_hours.get(WeekDay(day))
    if window is None:
        logger.debug("Employee %s has no working hours on %s", employee.id, day)
        return ValidationResult.fail(
            ErrorCode.NOT_WORKING_THIS_DAY,
            render(
                ErrorCode.NOT_WORKING_THIS_DAY,
                locale,
                employee_id=employee.id,
                day=WeekDay(day).value,
            ),
            entity_id=employee.id,
        )

    if to_minutes(start_time) < to_minutes(window.start_time) or to_minutes(
        end_time
    ) > to_minutes(window.end_time):
        logger.debug(
            "Session %s-%s outside working hours %s-%s of employee %s",
            start_time,
            end_time,
            window.start_time,
            window.end_time,
            employee.id,
        )
        return ValidationResult.fail(
            ErrorCode.OUTSIDE_WORKING_HOURS,
            render(
                ErrorCode.OUTSIDE_WORKING_HOURS,
                locale,
                employee_id=employee.id,
                start=start_time,
                end=end_time,
                window_start=window.start_time,
                window_end=window.end_time,
            ),
            entity_id=employee.id,
        )

    return ValidationResult.ok()


__all__ = ["check_working_hours"]
