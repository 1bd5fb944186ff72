# scripts/check.py
from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from therasched.dataloader.config_loader import ConfigLoader
from therasched.dataloader.postload_handler import LoadResultHandler
from therasched.dataloader.snapshot_loader import SnapshotLoader
from therasched.errors import DataError, TheraschedError
from therasched.export.report_export import (
    build_validation_report,
    write_sessions_csv,
    write_validation_report,
)
from therasched.schedule.lifecycle import find_session
from therasched.schemas.models import EngineConfig, ScheduleScope, Session, SessionUpdate
from therasched.schemas.results import ValidationResult
from therasched.validator.validator import (
    validate_patient_assignment,
    validate_patient_update,
    validate_session_placement,
    validate_session_update,
)


def _setup_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parse command-line arguments for a one-off validation.

    @details
    The candidate file holds one session as JSON (camelCase or snake_case).
    Without --patient or --update the candidate is validated as a new
    session placement.
    """
    parser = argparse.ArgumentParser(
        prog="therasched-check",
        description="Validate a session placement or patient assignment against a schedule snapshot",
    )

    # (1) Inputs
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to config YAML (default: config/config.yaml)",
    )
    parser.add_argument(
        "--snapshot", type=str, required=True, help="Path to the schedule snapshot JSON"
    )
    parser.add_argument(
        "--candidate", type=str, required=True, help="Path to the candidate session JSON"
    )

    # (2) Operation selection
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--patient",
        action="append",
        default=None,
        metavar="PATIENT_ID",
        help="Validate assigning this patient to the candidate session (repeatable)",
    )
    mode.add_argument(
        "--update",
        type=str,
        default=None,
        metavar="SESSION_ID",
        help="Treat the candidate as a partial update of this existing session",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Bypass forceable checks (blocking periods, patient conflicts, consecutive sessions)",
    )

    # (3) Output directory
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for artifacts (default: output_dir from config)",
    )

    return parser.parse_args(argv)


def _read_candidate(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise DataError(
            message=f"Candidate file not found: {path}",
            source="scripts.check",
            suggested_action="Pass --candidate pointing to a session JSON file.",
        )
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DataError(
            message=f"Candidate is not valid JSON: {e}",
            source="scripts.check",
            suggested_action="Fix the JSON syntax of the candidate file.",
        ) from e
    if not isinstance(data, dict):
        raise DataError(
            message="Candidate root must be a JSON object.",
            source="scripts.check",
            suggested_action="Describe exactly one session in the candidate file.",
        )
    return data


def _parse_model(model: type[Session] | type[SessionUpdate], data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise DataError(
            message=f"Invalid candidate {model.__name__}: {e}",
            source="scripts.check",
            suggested_action="Check candidate field names, day and HH:mm times.",
        ) from e


def _validate(
    data: dict[str, Any],
    scope: ScheduleScope,
    cfg: EngineConfig,
    *,
    patients: list[str] | None,
    update_of: str | None,
    force: bool,
) -> tuple[str, dict[str, Any], ValidationResult]:
    """Dispatch to the facade matching the requested operation."""
    # (1) Partial update of a persisted session
    if update_of is not None:
        update = _parse_model(SessionUpdate, data)
        result = validate_session_update(update_of, update, scope, force_create=force, cfg=cfg)
        return "update_session", {"session_id": update_of}, result

    session = _parse_model(Session, data)

    # (2) Placement of a new session
    if not patients:
        result = validate_session_placement(session, scope, force_create=force, cfg=cfg)
        return "create_session", {"session_id": session.id}, result

    # (3) Patient assignment: bulk path for persisted sessions
    subject = {"session_id": session.id, "patient_ids": list(patients)}
    if find_session(scope.sessions, session.id) is not None:
        result = validate_patient_update(session.id, patients, scope, force_assign=force, cfg=cfg)
        return "update_patients", subject, result

    for patient_id in patients:
        result = validate_patient_assignment(
            patient_id, session, scope, force_assign=force, cfg=cfg
        )
        if not result.valid:
            return "assign_patient", subject, result.model_copy(update={"patient_id": patient_id})
    return "assign_patient", subject, result


def run_check(
    config_path: Path,
    snapshot_path: Path,
    candidate_path: Path,
    output_dir: Path | None = None,
    *,
    patients: list[str] | None = None,
    update_of: str | None = None,
    force: bool = False,
) -> dict[str, Any]:
    """
    @brief
    Load inputs, run one validation, and write the artifacts.

    @details
    (1) Load configuration and snapshot (load errors go to load_errors.json).
    (2) Validate the candidate with the selected operation.
    (3) Write validation_report.json when enabled in config.
    (4) For an accepted create/update, export the resulting sessions.csv.

    @returns
        Dictionary with valid, status, body (HTTP contract) and artifact paths.

    @raises
        TheraschedError
            On configuration or data issues.
    """
    # (1) Inputs
    logging.info("Loading config: %s", config_path)
    cfg = ConfigLoader().load(config_path)
    out_dir = output_dir or Path(cfg.output_dir or "data/output")

    logging.info("Loading snapshot: %s", snapshot_path)
    load_result = SnapshotLoader().load(snapshot_path)
    snapshot = LoadResultHandler(output_dir=out_dir).handle(load_result)
    if snapshot is None:
        raise DataError(
            message=f"Snapshot load failed, see {(out_dir / 'load_errors.json').as_posix()}",
            source="scripts.check",
            suggested_action="Fix the issues reported in load_errors.json and rerun.",
        )
    scope = snapshot.to_scope()

    # (2) Validation
    data = _read_candidate(candidate_path)
    operation, subject, result = _validate(
        data, scope, cfg, patients=patients, update_of=update_of, force=force
    )
    status, body = result.to_response()
    if result.valid:
        logging.info("%s accepted", operation)
    elif result.is_warning:
        logging.warning("%s needs confirmation: %s", operation, result.error_message)
    else:
        logging.info("%s rejected: %s", operation, result.error_message)

    # (3) Report
    report_path: Path | None = None
    if cfg.validation.write_report:
        report = build_validation_report(result, operation, subject)
        report_path = write_validation_report(report, out_dir)

    # (4) Resulting sessions
    sessions_path: Path | None = None
    if result.valid and operation in ("create_session", "update_session"):
        sessions_path = write_sessions_csv(
            _apply(operation, data, scope, update_of), out_dir / "sessions.csv"
        )

    return {
        "valid": result.valid,
        "status": status,
        "body": body,
        "artifacts": {"validation_report": report_path, "sessions_csv": sessions_path},
    }


def _apply(
    operation: str, data: dict[str, Any], scope: ScheduleScope, update_of: str | None
) -> list[Session]:
    if operation == "update_session" and update_of is not None:
        update = SessionUpdate.model_validate(data)
        return [update.apply_to(s) if s.id == update_of else s for s in scope.sessions]
    return [*scope.sessions, Session.model_validate(data)]


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes:
      0 - candidate accepted
      1 - candidate rejected, or controlled failure (data/config)
      2 - unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    try:
        result = run_check(
            Path(args.config),
            Path(args.snapshot),
            Path(args.candidate),
            Path(args.output) if args.output else None,
            patients=args.patient,
            update_of=args.update,
            force=args.force,
        )
        print(json.dumps({"status": result["status"], **result["body"]}, ensure_ascii=False))
        return 0 if result["valid"] else 1

    except TheraschedError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
