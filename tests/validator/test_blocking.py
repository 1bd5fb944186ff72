# tests/validator/test_blocking.py
from __future__ import annotations

from tests.factories import mk_blocking
from therasched.schemas.models import Activity, DayOverride, WeekDay
from therasched.validator.blocking import effective_window, find_blocking_overlaps


def test_default_window_applies_without_override() -> None:
    act = mk_blocking(start="12:00", end="13:00")

    window = effective_window(act, WeekDay.MONDAY)

    assert window is not None
    assert (window.start_time, window.end_time) == ("12:00", "13:00")


def test_window_override_replaces_default() -> None:
    act = mk_blocking(overrides={"tuesday": DayOverride.window_of("14:00", "15:00")})

    window = effective_window(act, WeekDay.TUESDAY)

    assert window is not None
    assert window.start_time == "14:00"
    # other days keep the default
    assert effective_window(act, WeekDay.SUNDAY).start_time == "12:00"


def test_none_override_suppresses_default() -> None:
    """
    @brief
    An explicit "no block" override frees the day even with a default window.
    """
    # --- Arrange ---
    act = mk_blocking(overrides={"wednesday": DayOverride.no_block()})

    # --- Act ---
    hits = find_blocking_overlaps(WeekDay.WEDNESDAY, "12:00", "13:00", [act])

    # --- Assert ---
    assert effective_window(act, WeekDay.WEDNESDAY) is None
    assert hits == []


def test_half_set_default_means_no_window() -> None:
    act = mk_blocking(start="12:00", end=None)

    assert effective_window(act, WeekDay.SUNDAY) is None


def test_raw_wire_overrides_are_normalized() -> None:
    # --- Arrange ---
    act = Activity.model_validate(
        {
            "id": "A9",
            "name": "Lunch",
            "isBlocking": True,
            "defaultStartTime": "12:00",
            "defaultEndTime": "12:30",
            "dayOverrides": {
                "sunday": None,
                "monday": {"startTime": "13:00", "endTime": "13:30"},
            },
        }
    )

    # --- Assert ---
    assert act.day_overrides[WeekDay.SUNDAY].kind == "none"
    assert act.day_overrides[WeekDay.MONDAY].kind == "window"
    assert effective_window(act, WeekDay.SUNDAY) is None
    assert effective_window(act, WeekDay.MONDAY).start_time == "13:00"
    assert effective_window(act, WeekDay.TUESDAY).start_time == "12:00"


def test_non_blocking_and_inactive_activities_are_ignored() -> None:
    info = mk_blocking("A1", blocking=False)
    retired = mk_blocking("A2", active=False)
    meeting = mk_blocking("A3")

    hits = find_blocking_overlaps(WeekDay.SUNDAY, "12:30", "13:30", [info, retired, meeting])

    assert [a.id for a in hits] == ["A3"]


def test_session_touching_block_is_free() -> None:
    act = mk_blocking(start="12:00", end="13:00")

    assert find_blocking_overlaps(WeekDay.SUNDAY, "13:00", "14:00", [act]) == []
    assert find_blocking_overlaps(WeekDay.SUNDAY, "11:00", "12:00", [act]) == []
