# src/therasched/metrics/session_counts.py
"""
@brief
Fractional session bookkeeping for employees and patients.

@details
A session held every two weeks counts as half a weekly session, every other
session counts as one. These numbers feed the weekly targets of employees
and the per-role therapy requirements of patients; the conflict engine
itself never consults them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import pandas as pd

from therasched.errors import DataError
from therasched.schemas.models import Employee, Patient, Role, Session

logger = logging.getLogger(__name__)

_FRAME_COLUMNS = ["session_id", "employee_id", "patient_id", "weight"]


def session_fractional_count(every_two_weeks: bool) -> float:
    return 0.5 if every_two_weeks else 1.0


def total_session_count(sessions: Iterable[Session]) -> float:
    return float(sum(session_fractional_count(s.every_two_weeks) for s in sessions))


def employee_session_count(
    sessions: Iterable[Session], employee_id: str, require_patients: bool = False
) -> float:
    """Fractional count of an employee's sessions, optionally only those with patients."""
    return total_session_count(
        s
        for s in sessions
        if employee_id in s.employee_ids and (not require_patients or s.patient_ids)
    )


def patient_session_count(sessions: Iterable[Session], patient_id: str) -> float:
    return total_session_count(s for s in sessions if patient_id in s.patient_ids)


def format_session_count(count: float) -> str:
    """Whole numbers without decimals, halves with one decimal ("3", "2.5")."""
    return str(int(count)) if float(count).is_integer() else f"{count:.1f}"


def sessions_frame(sessions: Iterable[Session]) -> pd.DataFrame:
    """
    @brief
    Flatten sessions into one row per (session, employee, patient) pairing.

    @details
    Sessions without patients keep a single row per employee with
    patient_id=None, so employee totals still see them.

    @returns
        DataFrame with columns session_id, employee_id, patient_id, weight.
    """
    rows = []
    for s in sessions:
        weight = session_fractional_count(s.every_two_weeks)
        for employee_id in s.employee_ids or (None,):
            for patient_id in s.patient_ids or (None,):
                rows.append(
                    {
                        "session_id": s.id,
                        "employee_id": employee_id,
                        "patient_id": patient_id,
                        "weight": weight,
                    }
                )
    return pd.DataFrame(rows, columns=_FRAME_COLUMNS)


def employee_load(
    sessions: Iterable[Session], employees: Iterable[Employee], require_patients: bool = False
) -> pd.DataFrame:
    """
    @brief
    Assigned fractional sessions against each employee's weekly target.

    @params
        sessions : Iterable[Session]
            Sessions of one schedule.
        employees : Iterable[Employee]
            Employee catalog; every employee gets a row, even with no sessions.
        require_patients : bool
            Count only sessions that have at least one patient.

    @returns
        DataFrame indexed by employee_id with columns
        weekly_target, assigned, remaining (never negative).
    """
    # (1) One row per (session, employee), patients collapsed
    df = sessions_frame(sessions)
    if require_patients:
        df = df[df["patient_id"].notna()]
    per_session = df.drop_duplicates(subset=["session_id", "employee_id"])
    assigned = per_session.groupby("employee_id")["weight"].sum().astype("float64")

    # (2) Join with targets
    targets = pd.Series(
        {e.id: e.weekly_sessions_count for e in employees}, name="weekly_target", dtype="float64"
    )
    out = pd.DataFrame({"weekly_target": targets})
    out.index.name = "employee_id"
    out["assigned"] = assigned.reindex(out.index).fillna(0.0).astype("float64")
    out["remaining"] = (out["weekly_target"] - out["assigned"]).clip(lower=0.0)
    return out


def session_counts_by_role(
    sessions: Iterable[Session],
    patient_id: str,
    employees: Iterable[Employee],
    roles: Iterable[Role],
) -> dict[str, float]:
    """
    @brief
    Fractional sessions a patient receives, keyed by role string key.

    @details
    A session with several employees counts once for each employee's role.
    Employees without a resolvable role are skipped.
    """
    role_keys = {r.id: r.role_string_key for r in roles}
    employee_roles = {e.id: role_keys.get(e.role_id or "") for e in employees}

    df = sessions_frame(sessions)
    df = df[df["patient_id"] == patient_id].drop_duplicates(subset=["session_id", "employee_id"])
    if df.empty:
        return {}

    df = df.assign(role_key=df["employee_id"].map(employee_roles))
    df = df[df["role_key"].notna()]
    totals = df.groupby("role_key")["weight"].sum()
    return {str(k): float(v) for k, v in totals.items()}


def patient_requirement_progress(
    patient: Patient,
    sessions: Iterable[Session],
    employees: Iterable[Employee],
    roles: Iterable[Role],
) -> pd.DataFrame:
    """
    @brief
    Compare a patient's therapy requirements with what the schedule provides.

    @returns
        DataFrame indexed by role_key with columns required, assigned,
        remaining (never negative) and above_minimum (assigned > required).
        Roles the patient receives without a stated requirement appear with
        required=0.

    @raises
        DataError
            If a requirement is negative.
    """
    negative = {k: v for k, v in patient.therapy_requirements.items() if v < 0}
    if negative:
        raise DataError(
            f"Negative therapy requirement(s) for patient {patient.id}: {negative}",
            source="session_counts.patient_requirement_progress",
            suggested_action="Requirements are minimum weekly session counts (>= 0).",
        )

    received = session_counts_by_role(list(sessions), patient.id, employees, roles)
    keys = list(dict.fromkeys([*patient.therapy_requirements, *received]))

    index = pd.Index(keys, name="role_key", dtype="object")
    out = pd.DataFrame(
        {
            "required": pd.Series(
                [patient.therapy_requirements.get(k, 0) for k in keys], index=index, dtype="float64"
            ),
            "assigned": pd.Series(
                [received.get(k, 0.0) for k in keys], index=index, dtype="float64"
            ),
        },
        index=index,
    )
    out["remaining"] = (out["required"] - out["assigned"]).clip(lower=0.0)
    out["above_minimum"] = out["assigned"] > out["required"]
    logger.debug(
        "Patient %s: %d role(s), %.1f session(s) remaining",
        patient.id,
        len(out),
        float(out["remaining"].sum()),
    )
    return out


__all__ = [
    "session_fractional_count",
    "total_session_count",
    "employee_session_count",
    "patient_session_count",
    "format_session_count",
    "sessions_frame",
    "employee_load",
    "session_counts_by_role",
    "patient_requirement_progress",
]
