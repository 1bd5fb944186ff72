# tests/validator/test_conflicts.py
from __future__ import annotations

from tests.factories import mk_session
from therasched.validator.conflicts import (
    employee_conflicts,
    find_conflicts,
    patient_conflicts,
    room_conflicts,
    same_schedule,
)


def test_employee_conflict_found_on_overlap() -> None:
    # --- Arrange ---
    existing = [mk_session("S1", "09:00", "10:00", employees=("E1",), room="R9")]
    candidate = mk_session("NEW", "09:30", "10:30", employees=("E1",), room="R1")

    # --- Act ---
    hits = employee_conflicts(candidate, existing, "E1")

    # --- Assert ---
    assert [s.id for s in hits] == ["S1"]


def test_back_to_back_sessions_do_not_conflict() -> None:
    existing = [mk_session("S1", "09:00", "10:00")]
    candidate = mk_session("NEW", "10:00", "11:00")

    assert employee_conflicts(candidate, existing, "E1") == []
    assert room_conflicts(candidate, existing) == []


def test_candidate_never_conflicts_with_itself() -> None:
    """
    @brief
    Editing a session must not report the session as its own conflict.
    """
    # --- Arrange ---
    persisted = mk_session("S1", "09:00", "10:00", patients=("P1",))
    edited = mk_session("S1", "09:15", "10:15", patients=("P1",))

    # --- Act / Assert ---
    assert employee_conflicts(edited, [persisted], "E1") == []
    assert room_conflicts(edited, [persisted]) == []
    assert patient_conflicts(edited, [persisted], "P1") == []


def test_other_weekday_does_not_conflict() -> None:
    existing = [mk_session("S1", "09:00", "10:00", day="monday")]
    candidate = mk_session("NEW", "09:00", "10:00", day="sunday")

    assert room_conflicts(candidate, existing) == []


def test_room_conflict_ignores_employee_identity() -> None:
    existing = [mk_session("S1", "09:00", "10:00", employees=("E2",), room="R1")]
    candidate = mk_session("NEW", "09:30", "10:00", employees=("E1",), room="R1")

    assert [s.id for s in room_conflicts(candidate, existing)] == ["S1"]
    assert employee_conflicts(candidate, existing, "E1") == []


def test_patient_conflict_matches_only_that_patient() -> None:
    existing = [
        mk_session("S1", "09:00", "10:00", room="R2", patients=("P1",)),
        mk_session("S2", "09:00", "10:00", room="R3", employees=("E3",), patients=("P2",)),
    ]
    candidate = mk_session("NEW", "09:30", "10:30")

    assert [s.id for s in patient_conflicts(candidate, existing, "P2")] == ["S2"]


def test_sessions_of_other_schedules_are_ignored() -> None:
    existing = [mk_session("S1", "09:00", "10:00", schedule="OLD")]
    candidate = mk_session("NEW", "09:00", "10:00", schedule="SCH1")

    assert room_conflicts(candidate, existing) == []


def test_missing_schedule_id_counts_as_same_schedule() -> None:
    a = mk_session("S1", "09:00", "10:00", schedule=None)
    b = mk_session("S2", "09:00", "10:00", schedule="SCH1")

    assert same_schedule(a, b) is True
    assert same_schedule(b, a) is True


def test_find_conflicts_preserves_input_order() -> None:
    existing = [
        mk_session("S3", "09:30", "10:00", room="R3"),
        mk_session("S1", "09:00", "09:45", room="R1"),
        mk_session("S2", "11:00", "12:00", room="R2"),
    ]
    candidate = mk_session("NEW", "09:00", "10:00")

    hits = find_conflicts(candidate, existing, lambda s: True)

    assert [s.id for s in hits] == ["S3", "S1"]
