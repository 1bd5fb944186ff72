# tests/metrics/test_session_counts.py
from __future__ import annotations

import pandas as pd
import pytest

from tests.factories import mk_employee, mk_patient, mk_role, mk_session
from therasched.errors import DataError
from therasched.metrics.session_counts import (
    employee_load,
    employee_session_count,
    format_session_count,
    patient_requirement_progress,
    patient_session_count,
    session_counts_by_role,
    session_fractional_count,
    sessions_frame,
    total_session_count,
)


def _sessions():
    return [
        mk_session("S1", "09:00", "10:00", employees=("E1",), patients=("P1",)),
        mk_session(
            "S2", "10:00", "11:00", employees=("E1", "E2"), patients=("P1",), every_two_weeks=True
        ),
        mk_session("S3", "11:00", "12:00", employees=("E2",)),
    ]


def test_fractional_count_rule() -> None:
    assert session_fractional_count(False) == 1.0
    assert session_fractional_count(True) == 0.5


def test_total_count_mixes_weekly_and_biweekly() -> None:
    assert total_session_count(_sessions()) == pytest.approx(2.5)
    assert total_session_count([]) == 0.0


def test_employee_and_patient_counts() -> None:
    sessions = _sessions()

    assert employee_session_count(sessions, "E1") == pytest.approx(1.5)
    assert employee_session_count(sessions, "E2") == pytest.approx(1.5)
    assert employee_session_count(sessions, "E2", require_patients=True) == pytest.approx(0.5)
    assert patient_session_count(sessions, "P1") == pytest.approx(1.5)


def test_format_session_count() -> None:
    assert format_session_count(3.0) == "3"
    assert format_session_count(2.5) == "2.5"


def test_sessions_frame_has_one_row_per_pairing() -> None:
    df = sessions_frame(_sessions())

    assert list(df.columns) == ["session_id", "employee_id", "patient_id", "weight"]
    # S1: 1 row, S2: 2 employees x 1 patient, S3: 1 row without patient
    assert len(df) == 4
    assert df.loc[df["session_id"] == "S3", "patient_id"].isna().all()


def test_employee_load_against_weekly_target() -> None:
    """
    @brief
    Every catalog employee gets a row; remaining never goes negative.
    """
    # --- Arrange ---
    employees = [
        mk_employee("E1", weekly=4),
        mk_employee("E2", weekly=1),
        mk_employee("E3", weekly=2),
    ]

    # --- Act ---
    load = employee_load(_sessions(), employees)

    # --- Assert ---
    assert isinstance(load, pd.DataFrame)
    assert load.loc["E1", "assigned"] == pytest.approx(1.5)
    assert load.loc["E1", "remaining"] == pytest.approx(2.5)
    assert load.loc["E2", "remaining"] == pytest.approx(0.0)
    assert load.loc["E3", "assigned"] == pytest.approx(0.0)


def test_counts_by_role_count_each_employee_role() -> None:
    # --- Arrange ---
    roles = [mk_role("R-OT", "occupational"), mk_role("R-SP", "speech")]
    employees = [
        mk_employee("E1", role_id="R-OT"),
        mk_employee("E2", role_id="R-SP"),
    ]

    # --- Act ---
    counts = session_counts_by_role(_sessions(), "P1", employees, roles)

    # --- Assert ---
    assert counts == {"occupational": pytest.approx(1.5), "speech": pytest.approx(0.5)}
    assert session_counts_by_role(_sessions(), "P9", employees, roles) == {}


def test_patient_requirement_progress() -> None:
    # --- Arrange ---
    roles = [mk_role("R-OT", "occupational"), mk_role("R-SP", "speech")]
    employees = [mk_employee("E1", role_id="R-OT"), mk_employee("E2", role_id="R-SP")]
    patient = mk_patient("P1", requirements={"occupational": 1, "physio": 2})

    # --- Act ---
    progress = patient_requirement_progress(patient, _sessions(), employees, roles)

    # --- Assert ---
    assert list(progress.index) == ["occupational", "physio", "speech"]
    assert progress.loc["occupational", "assigned"] == pytest.approx(1.5)
    assert bool(progress.loc["occupational", "above_minimum"]) is True
    assert progress.loc["physio", "remaining"] == pytest.approx(2.0)
    assert progress.loc["speech", "required"] == pytest.approx(0.0)


def test_negative_requirement_is_rejected() -> None:
    patient = mk_patient("P1", requirements={"speech": -1})

    with pytest.raises(DataError):
        patient_requirement_progress(patient, [], [], [])
