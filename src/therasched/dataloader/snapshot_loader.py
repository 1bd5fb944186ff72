# src/therasched/dataloader/snapshot_loader.py
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from therasched.dataloader.types import LoadResult, ScheduleSnapshot
from therasched.errors import DataError
from therasched.schemas.models import (
    ALL_DAYS,
    Activity,
    Employee,
    Patient,
    Role,
    Room,
    Session,
)
from therasched.validator.timeutil import to_minutes

logger = logging.getLogger(__name__)


class SnapshotLoader:
    """
    JSON -> LoadResult[ScheduleSnapshot].

    Rules:
      - Format: UTF-8 JSON object with list sections
        employees, rooms, sessions (required), activities, patients, roles (optional)
      - Optional top-level "scheduleId" is applied to sessions that carry none
      - Record-level validation (collect and continue):
          * record fails the model schema  -> schema_error
          * id repeated within a section   -> duplicate_id (first record is kept)
          * session start_time >= end_time -> non_positive_duration
      - On completion:
          * any issue -> success=False, snapshot=None, errors=[...]
          * otherwise -> success=True, sessions sorted by (day, start_time)

    Fatal errors (raise DataError immediately):
      - missing / unreadable file, invalid JSON
      - root is not an object, a required section is missing or not a list
    """

    REQUIRED_SECTIONS = ("employees", "rooms", "sessions")
    SECTION_MODELS: dict[str, type[BaseModel]] = {
        "employees": Employee,
        "rooms": Room,
        "activities": Activity,
        "sessions": Session,
        "patients": Patient,
        "roles": Role,
    }

    def load(self, path: Path) -> LoadResult:
        data = self._read_json(path)
        result = self._build_result(data)
        self._report_summary(path, result)
        return result

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_json(self, path: Path) -> dict[str, Any]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="SnapshotLoader._read_json",
                suggested_action="Pass a pathlib.Path pointing to the snapshot JSON.",
            )
        if not path.exists():
            raise DataError(
                message=f"Snapshot file not found: {path}",
                source="SnapshotLoader._read_json",
                suggested_action="Verify the file path and ensure the snapshot is present.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataError(
                message=f"Snapshot is not valid JSON: {e}",
                source="SnapshotLoader._read_json",
                suggested_action="Fix the JSON syntax of the snapshot file.",
            ) from e
        except OSError as e:
            raise DataError(
                message=f"Unable to read snapshot: {e}",
                source="SnapshotLoader._read_json",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e

        if not isinstance(data, Mapping):
            raise DataError(
                message="Snapshot root must be a JSON object.",
                source="SnapshotLoader._read_json",
                suggested_action="Wrap sections in an object: {\"employees\": [...], ...}",
            )
        self._validate_sections(data)
        return dict(data)

    def _validate_sections(self, data: Mapping[str, Any]) -> None:
        missing = [s for s in self.REQUIRED_SECTIONS if s not in data]
        if missing:
            raise DataError(
                message=f"Invalid snapshot: missing required section(s): {', '.join(missing)}",
                source="SnapshotLoader._validate_sections",
                suggested_action="Add required sections: employees, rooms, sessions",
            )
        for name in self.SECTION_MODELS:
            value = data.get(name)
            if value is not None and not isinstance(value, list):
                raise DataError(
                    message=f"Section '{name}' must be a list, got {type(value).__name__}",
                    source="SnapshotLoader._validate_sections",
                    suggested_action=f"Provide '{name}' as a JSON array.",
                )

    def _build_result(self, data: dict[str, Any]) -> LoadResult:
        issues: list[dict[str, Any]] = []
        parsed: dict[str, list[Any]] = {}
        total = 0
        schedule_id = data.get("scheduleId") or data.get("schedule_id")

        for section, model in self.SECTION_MODELS.items():
            records = data.get(section) or []
            total += len(records)
            parsed[section] = self._parse_section(section, model, records, schedule_id, issues)

        kept = sum(len(items) for items in parsed.values())
        if issues:
            return LoadResult(
                success=False,
                snapshot=None,
                errors=issues,
                total_rows=total,
                kept_rows=0,
            )

        sessions = sorted(
            parsed["sessions"], key=lambda s: (ALL_DAYS.index(s.day), to_minutes(s.start_time))
        )
        snapshot = ScheduleSnapshot(
            schedule_id=schedule_id,
            employees=parsed["employees"],
            rooms=parsed["rooms"],
            activities=parsed["activities"],
            sessions=sessions,
            patients=parsed["patients"] if data.get("patients") is not None else None,
            roles=parsed["roles"],
        )
        return LoadResult(
            success=True, snapshot=snapshot, errors=[], total_rows=total, kept_rows=kept
        )

    def _parse_section(
        self,
        section: str,
        model: type[BaseModel],
        records: list[Any],
        schedule_id: str | None,
        issues: list[dict[str, Any]],
    ) -> list[Any]:
        items: list[Any] = []
        seen_ids: set[str] = set()

        for idx, raw in enumerate(records):
            raw_id = raw.get("id") if isinstance(raw, Mapping) else None

            # schema
            try:
                if not isinstance(raw, Mapping):
                    raise TypeError(f"expected an object, got {type(raw).__name__}")
                if section == "sessions" and schedule_id and not _has_schedule_id(raw):
                    raw = {**raw, "scheduleId": schedule_id}
                item = model.model_validate(raw)
            except (ValidationError, TypeError) as e:
                issues.append(
                    {
                        "kind": "schema_error",
                        "section": section,
                        "index": idx,
                        "entity_id": raw_id,
                        "message": f"{model.__name__} construction failed: {e}",
                    }
                )
                continue

            # non-positive duration
            if isinstance(item, Session) and to_minutes(item.start_time) >= to_minutes(
                item.end_time
            ):
                issues.append(
                    {
                        "kind": "non_positive_duration",
                        "section": section,
                        "index": idx,
                        "entity_id": item.id,
                        "message": "start_time >= end_time",
                    }
                )
                continue

            # duplicates: keep first valid, later are issues
            if item.id in seen_ids:
                issues.append(
                    {
                        "kind": "duplicate_id",
                        "section": section,
                        "index": idx,
                        "entity_id": item.id,
                        "message": f"Duplicate id in '{section}' (later occurrence skipped)",
                    }
                )
                continue

            items.append(item)
            seen_ids.add(item.id)

        return items

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "SnapshotLoader OK: kept=%d/%d record(s) from %s",
                result.kept_rows,
                result.total_rows,
                path,
            )
        else:
            counts: dict[str, int] = {}
            for it in result.errors:
                counts[it["kind"]] = counts.get(it["kind"], 0) + 1
            summary = ", ".join(f"{k}={v}" for k, v in counts.items())
            logger.error(
                "SnapshotLoader failed: %d issue(s) across %d record(s) in %s [%s]",
                len(result.errors),
                result.total_rows,
                path,
                summary or "no-summary",
            )


def _has_schedule_id(raw: Mapping[str, Any]) -> bool:
    return bool(raw.get("scheduleId") or raw.get("schedule_id"))


__all__ = ["SnapshotLoader"]
