# tests/validator/test_consecutive.py
from __future__ import annotations

import pytest

from tests.factories import mk_session
from therasched.errors import DataError
from therasched.schemas.models import Session
from therasched.validator.consecutive import (
    check_consecutive_sessions,
    count_consecutive_sessions,
)


def _existing(*spans: tuple[str, str], day: str = "sunday") -> list[Session]:
    return [
        mk_session(f"S{i}", start, end, day=day, patients=("P1",))
        for i, (start, end) in enumerate(spans, start=1)
    ]


def test_single_session_counts_one() -> None:
    candidate = mk_session("NEW", "09:00", "10:00")

    assert count_consecutive_sessions(candidate, []) == 1


def test_back_to_back_pair_is_allowed() -> None:
    # --- Arrange ---
    candidate = mk_session("NEW", "10:00", "11:00")

    # --- Act ---
    check = check_consecutive_sessions("P1", candidate, _existing(("09:00", "10:00")))

    # --- Assert ---
    assert check.valid is True
    assert check.consecutive_count == 2
    assert check.warning is None


def test_third_back_to_back_session_warns() -> None:
    """
    @brief
    Three chained sessions exceed the default maximum of two.

    @details
    The failure carries the chain length and a message asking for
    confirmation; it is not an outright rejection.
    """
    # --- Arrange ---
    candidate = mk_session("NEW", "11:00", "12:00")
    existing = _existing(("09:00", "10:00"), ("10:00", "11:00"))

    # --- Act ---
    check = check_consecutive_sessions("P1", candidate, existing, locale="en")

    # --- Assert ---
    assert check.valid is False
    assert check.consecutive_count == 3
    assert check.warning is not None and "3 consecutive" in check.warning


def test_fifteen_minute_gap_breaks_the_chain() -> None:
    candidate = mk_session("NEW", "11:30", "12:30")
    existing = _existing(("09:00", "10:00"), ("10:00", "11:15"))

    assert count_consecutive_sessions(candidate, existing) == 1


def test_fourteen_minute_gap_is_still_consecutive() -> None:
    candidate = mk_session("NEW", "11:29", "12:30")
    existing = _existing(("09:00", "10:00"), ("10:00", "11:15"))

    check = check_consecutive_sessions("P1", candidate, existing)

    assert check.consecutive_count == 3
    assert check.valid is False


def test_candidate_in_the_middle_counts_both_sides() -> None:
    candidate = mk_session("NEW", "10:00", "11:00")
    existing = _existing(("09:00", "10:00"), ("11:00", "12:00"))

    assert count_consecutive_sessions(candidate, existing) == 3


def test_walks_are_independent_of_each_other() -> None:
    """
    @brief
    A break before the candidate does not stop counting after it.
    """
    # --- Arrange ---
    # 08:00-09:00 | break | NEW 10:00-11:00, 11:05-12:00, 12:00-13:00
    candidate = mk_session("NEW", "10:00", "11:00")
    existing = _existing(("08:00", "09:00"), ("11:05", "12:00"), ("12:00", "13:00"))

    # --- Act ---
    count = count_consecutive_sessions(candidate, existing)

    # --- Assert ---
    assert count == 3


def test_four_session_chain() -> None:
    candidate = mk_session("NEW", "12:00", "13:00")
    existing = _existing(("09:00", "10:00"), ("10:00", "11:00"), ("11:00", "12:00"))

    check = check_consecutive_sessions("P1", candidate, existing)

    assert check.consecutive_count == 4
    assert check.valid is False


def test_other_weekdays_are_ignored() -> None:
    candidate = mk_session("NEW", "11:00", "12:00", day="sunday")
    existing = _existing(("09:00", "10:00"), ("10:00", "11:00"), day="monday")

    assert count_consecutive_sessions(candidate, existing) == 1


def test_candidate_already_persisted_is_not_double_counted() -> None:
    candidate = mk_session("S1", "09:00", "10:00", patients=("P1",))
    existing = _existing(("09:00", "10:00"), ("10:00", "11:00"))

    assert count_consecutive_sessions(candidate, existing) == 2


def test_thresholds_are_configurable() -> None:
    candidate = mk_session("NEW", "10:20", "11:00")
    existing = _existing(("09:00", "10:00"))

    check = check_consecutive_sessions(
        "P1", candidate, existing, break_minutes=30, max_consecutive=1
    )

    assert check.consecutive_count == 2
    assert check.valid is False


def test_default_warning_is_hebrew() -> None:
    candidate = mk_session("NEW", "11:00", "12:00")
    existing = _existing(("09:00", "10:00"), ("10:00", "11:00"))

    check = check_consecutive_sessions("P1", candidate, existing)

    assert check.warning is not None
    assert "3" in check.warning and "רצופים" in check.warning


def test_missing_patient_id_raises() -> None:
    candidate = mk_session("NEW", "09:00", "10:00")

    with pytest.raises(DataError) as e:
        check_consecutive_sessions("", candidate, [])

    assert "Missing required parameters" in str(e.value)
