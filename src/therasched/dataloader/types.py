# src/therasched/dataloader/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from therasched.schemas.models import (
    Activity,
    Employee,
    Patient,
    Role,
    Room,
    ScheduleScope,
    Session,
)


@dataclass(slots=True)
class ScheduleSnapshot:
    """
    Everything read from one snapshot file.

    Fields:
        schedule_id: id of the schedule the sessions belong to (may be None).
        employees, rooms, activities, sessions: catalogs and persisted sessions.
        patients: patient catalog, or None when the file has no "patients" key.
        roles: role catalog (used by session counting only).
    """

    schedule_id: str | None = None
    employees: list[Employee] = field(default_factory=list)
    rooms: list[Room] = field(default_factory=list)
    activities: list[Activity] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)
    patients: list[Patient] | None = None
    roles: list[Role] = field(default_factory=list)

    def to_scope(self) -> ScheduleScope:
        return ScheduleScope(
            employees=self.employees,
            rooms=self.rooms,
            activities=self.activities,
            sessions=self.sessions,
            patients=self.patients,
        )


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of a snapshot loading step.

    Fields:
        success: True if no record-level issues were found.
        snapshot: parsed snapshot (None if success=False).
        errors: issue dicts with per-record context, each holding at least
                kind, section, index, message and entity_id (may be None).
        total_rows: number of records observed across all sections.
        kept_rows: number of records that parsed cleanly.
    """

    success: bool
    snapshot: ScheduleSnapshot | None = None
    errors: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    kept_rows: int = 0
