# tests/validator/test_messages.py
from __future__ import annotations

from therasched.schemas.results import ErrorCode
from therasched.validator.messages import render


def test_every_code_has_a_message_in_both_locales() -> None:
    for code in ErrorCode:
        assert render(code, "he")
        assert render(code, "en")


def test_placeholders_are_filled() -> None:
    msg = render(ErrorCode.EMPLOYEE_BUSY, "en", employee_id="E3")

    assert msg == "Employee E3 is busy at this time"


def test_missing_placeholder_renders_question_mark() -> None:
    msg = render(ErrorCode.ROOM_NOT_FOUND, "en")

    assert msg == "Room ? not found"


def test_unknown_locale_falls_back_to_hebrew() -> None:
    assert render(ErrorCode.EMPLOYEE_NOT_FOUND, "fr") == render(ErrorCode.EMPLOYEE_NOT_FOUND, "he")
    assert render(ErrorCode.EMPLOYEE_NOT_FOUND) == "עובד לא נמצא"
