# src/therasched/export/report_export.py
from __future__ import annotations

import csv
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from therasched.errors import ExportError
from therasched.schemas.models import Session
from therasched.schemas.results import ValidationResult

logger = logging.getLogger(__name__)

SESSION_COLUMNS = (
    "id",
    "schedule_id",
    "day",
    "start_time",
    "end_time",
    "employee_ids",
    "room_id",
    "patient_ids",
    "every_two_weeks",
    "notes",
)

# Separator for multi-valued id cells
ID_SEPARATOR = ";"


def build_validation_report(
    result: ValidationResult, operation: str, subject: dict[str, Any] | None = None
) -> dict[str, Any]:
    """
    @brief
    Turn a ValidationResult into a JSON-serializable report.

    @details
    The report records what was validated (`operation`, `subject`), the
    outcome, and for failures the error code together with its HTTP
    translation, so a rejected request can be reproduced offline.

    @params
        result : ValidationResult
            Outcome of one validation call.
        operation : str
            Name of the validated operation ("create_session", "assign_patient", ...).
        subject : dict[str, Any] | None
            Identifiers of the candidate (session id, patient id, ...).

    @returns
        Report dictionary with timestamp, operation, subject, valid,
        is_warning, consecutive_count and error (None on success).
    """
    status, body = result.to_response()
    error: dict[str, Any] | None = None
    if not result.valid and result.error_code is not None:
        error = {
            "code": result.error_code.value,
            "api_code": body.get("code"),
            "http_status": status,
            "message": result.error_message,
            "entity_id": result.entity_id,
            "patient_id": result.patient_id,
            "conflicting_session_ids": list(result.conflicting_session_ids),
        }

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "operation": operation,
        "subject": dict(subject or {}),
        "valid": result.valid,
        "is_warning": result.is_warning,
        "consecutive_count": result.consecutive_count,
        "error": error,
    }


def write_validation_report(
    report: dict[str, Any], out_dir: Path, filename: str = "validation_report.json"
) -> Path:
    """
    @brief
    Write a validation report atomically as UTF-8 JSON.

    @raises
        ExportError
            If the report is not serializable or the write fails.
    """
    try:
        payload = json.dumps(report, ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as e:
        raise ExportError(
            f"Validation report is not JSON-serializable: {e}",
            source="export.write_validation_report",
            suggested_action="Build the report with build_validation_report().",
        ) from e

    target = Path(out_dir) / filename
    _atomic_write_text(target, payload + "\n")
    logger.info("Validation report saved: %s", target)
    return target


def write_sessions_csv(sessions: Iterable[Session], out_path: Path) -> Path:
    """
    @brief
    Export sessions to CSV, one row per session.

    @details
    Rows are ordered as given. Multi-valued id fields are joined with ';'.
    The file is written atomically and is readable by pandas.read_csv.

    @raises
        ExportError
            If two sessions share an id or the write fails.
    """
    # (1) Normalize rows and reject duplicate ids
    rows: list[dict[str, str]] = []
    seen: set[str] = set()
    for s in sessions:
        if s.id in seen:
            raise ExportError(
                f"Duplicate session id detected: {s.id}",
                source="export.write_sessions_csv",
                suggested_action="Ensure each session appears once in the export.",
            )
        seen.add(s.id)
        rows.append(
            {
                "id": s.id,
                "schedule_id": s.schedule_id or "",
                "day": s.day.value,
                "start_time": s.start_time,
                "end_time": s.end_time,
                "employee_ids": ID_SEPARATOR.join(s.employee_ids),
                "room_id": s.room_id,
                "patient_ids": ID_SEPARATOR.join(s.patient_ids),
                "every_two_weeks": "true" if s.every_two_weeks else "false",
                "notes": s.notes or "",
            }
        )

    # (2) Serialize in memory, then swap into place
    out_path = Path(out_path)
    tmp_fd, tmp_name = tempfile.mkstemp(
        dir=str(_ensure_dir(out_path.parent)), suffix=".tmp", text=True
    )
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=SESSION_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
        os.replace(tmp_name, out_path)
    except OSError as e:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise ExportError(
            f"Failed to write sessions CSV {out_path}: {e}",
            source="export.write_sessions_csv",
            suggested_action="Check output directory permissions and disk space.",
        ) from e

    logger.info("Exported %d session(s) to %s", len(rows), out_path)
    return out_path


def _ensure_dir(d: Path) -> Path:
    d.mkdir(parents=True, exist_ok=True)
    return d


def _atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """
    @brief
    Atomic text write through a temporary file in the target directory.

    @raises
        ExportError
            On write or rename failure.
    """
    fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(_ensure_dir(path.parent)))
    try:
        with open(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise ExportError(
            f"atomic write failed for {path}: {e}",
            source="export._atomic_write_text",
            suggested_action="Check output directory permissions and disk space.",
        ) from e


__all__ = [
    "SESSION_COLUMNS",
    "build_validation_report",
    "write_validation_report",
    "write_sessions_csv",
]
