"""
@brief
Pydantic data models for the Therasched validation engine.

@details
Defines the canonical snapshot types handed to the engine by its caller:
    - Employee, Room, Role, Patient: resource catalogs
    - Activity: recurring (possibly blocking) time window with per-weekday overrides
    - Session, SessionUpdate, Schedule: the schedule being edited
    - EngineConfig: runtime configuration (from config.yaml)

Domain models are immutable snapshots. They accept both snake_case field names
and the camelCase names used on the JSON wire (startTime, employeeIds, ...), and
ignore display-only fields (names, colors) they do not need.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"


class WeekDay(str, Enum):
    """Days of the week, in calendar order starting on Sunday."""

    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"


ALL_DAYS: tuple[WeekDay, ...] = tuple(WeekDay)

# The clinic's work week
WEEK_DAYS: tuple[WeekDay, ...] = ALL_DAYS[:5]


class _DomainModel(BaseModel):
    """
    @brief
    Base model for immutable domain snapshots.

    @details
    Frozen so that a snapshot cannot change under a running validation.
    Unknown fields are ignored: catalogs arrive with UI attributes
    (firstName, color, ...) the engine never reads.
    """

    model_config = {
        "extra": "ignore",
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration contracts.

    @details
    Forbids unknown fields so that typos in config.yaml surface as errors.
    """

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "use_enum_values": True,
    }


# ------------------------------------------------------------
# Time windows
# ------------------------------------------------------------
class TimeRange(_DomainModel):
    """Wall-clock window within one day, both bounds in HH:mm."""

    start_time: str = Field(..., pattern=TIME_PATTERN, description="Window start (HH:mm)")
    end_time: str = Field(..., pattern=TIME_PATTERN, description="Window end (HH:mm)")


class DayOverride(_DomainModel):
    """
    @brief
    Per-weekday override of an activity's default window.

    @details
    Tagged union with two variants:
        kind="window" : the activity runs in `window` on that day
        kind="none"   : the activity does not run on that day, even if a default exists
    An absent weekday key (no DayOverride at all) means "fall back to the default".
    """

    kind: Literal["window", "none"]
    window: TimeRange | None = None

    @model_validator(mode="after")
    def _check_variant(self) -> DayOverride:
        if self.kind == "window" and self.window is None:
            raise ValueError("DayOverride(kind='window') requires a window")
        if self.kind == "none" and self.window is not None:
            raise ValueError("DayOverride(kind='none') must not carry a window")
        return self

    @classmethod
    def window_of(cls, start_time: str, end_time: str) -> DayOverride:
        return cls(kind="window", window=TimeRange(start_time=start_time, end_time=end_time))

    @classmethod
    def no_block(cls) -> DayOverride:
        return cls(kind="none")


# ------------------------------------------------------------
# Resource catalogs
# ------------------------------------------------------------
class Role(_DomainModel):
    id: str
    name: str = ""
    role_string_key: str = Field(..., description="Key used in patient therapy requirements")


class Employee(_DomainModel):
    """
    @brief
    Therapist with declared weekly working hours.

    @details
    A weekday missing from `working_hours` means the employee does not work that day.
    Explicit nulls on the wire are treated the same as a missing key.
    """

    id: str
    working_hours: dict[WeekDay, TimeRange] = Field(default_factory=dict)
    role_id: str | None = None
    weekly_sessions_count: int = Field(0, ge=0, description="Weekly session target")
    is_active: bool = True

    @field_validator("working_hours", mode="before")
    @classmethod
    def _drop_null_days(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {k: v for k, v in value.items() if v is not None}
        return value


class Room(_DomainModel):
    id: str
    is_active: bool = True


class Patient(_DomainModel):
    id: str
    therapy_requirements: dict[str, int] = Field(
        default_factory=dict, description="Role key -> minimum weekly sessions"
    )
    is_active: bool = True


class Activity(_DomainModel):
    """
    @brief
    Recurring activity or blocked period (staff meeting, lunch, ...).

    @details
    Only active activities with `is_blocking=True` restrict session placement.
    The default window applies when both bounds are set; `day_overrides` replaces
    or suppresses it per weekday. Raw wire values are normalized into DayOverride:
        {"startTime": ..., "endTime": ...} -> kind="window"
        null                               -> kind="none"
    """

    id: str
    name: str = ""
    is_blocking: bool = False
    is_active: bool = True
    default_start_time: str | None = Field(None, pattern=TIME_PATTERN)
    default_end_time: str | None = Field(None, pattern=TIME_PATTERN)
    day_overrides: dict[WeekDay, DayOverride] = Field(default_factory=dict)

    @field_validator("day_overrides", mode="before")
    @classmethod
    def _normalize_overrides(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        normalized: dict[Any, Any] = {}
        for day, raw in value.items():
            if raw is None:
                normalized[day] = {"kind": "none"}
            elif isinstance(raw, Mapping) and "kind" not in raw:
                normalized[day] = {"kind": "window", "window": dict(raw)}
            else:
                normalized[day] = raw
        return normalized

    @property
    def default_window(self) -> TimeRange | None:
        if self.default_start_time and self.default_end_time:
            return TimeRange(start_time=self.default_start_time, end_time=self.default_end_time)
        return None


# ------------------------------------------------------------
# Sessions and schedules
# ------------------------------------------------------------
class Session(_DomainModel):
    """
    @brief
    One therapy session placed in a schedule.

    @details
    Belongs to exactly one schedule and is never moved between schedules.
    `every_two_weeks` sessions count as half a session in weekly bookkeeping.
    """

    id: str
    schedule_id: str | None = None
    day: WeekDay
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    employee_ids: tuple[str, ...] = ()
    room_id: str
    patient_ids: tuple[str, ...] = ()
    every_two_weeks: bool = False
    notes: str | None = None


class SessionUpdate(_DomainModel):
    """Partial session change; unset fields keep the current value."""

    day: WeekDay | None = None
    start_time: str | None = Field(None, pattern=TIME_PATTERN)
    end_time: str | None = Field(None, pattern=TIME_PATTERN)
    employee_ids: tuple[str, ...] | None = None
    room_id: str | None = None
    patient_ids: tuple[str, ...] | None = None
    every_two_weeks: bool | None = None
    notes: str | None = None

    PLACEMENT_FIELDS: ClassVar[tuple[str, ...]] = (
        "day",
        "start_time",
        "end_time",
        "employee_ids",
        "room_id",
    )

    def touches_placement(self) -> bool:
        return any(getattr(self, name) is not None for name in self.PLACEMENT_FIELDS)

    def apply_to(self, current: Session) -> Session:
        changes = self.model_dump(exclude_none=True)
        return current.model_copy(update=changes)


class Schedule(_DomainModel):
    id: str
    sessions: tuple[Session, ...] = ()
    is_active: bool = False


# ------------------------------------------------------------
# Validation scope (one schedule's snapshot)
# ------------------------------------------------------------
@dataclass(frozen=True)
class ScheduleScope:
    """
    Snapshot of everything a validation call may consult.

    Fields:
        employees: employee catalog.
        rooms: room catalog.
        activities: activities / blocked periods (inactive ones are ignored).
        sessions: persisted sessions of the target schedule.
        patients: optional patient catalog; when None, patient ids are not resolved.
    """

    employees: tuple[Employee, ...] = ()
    rooms: tuple[Room, ...] = ()
    activities: tuple[Activity, ...] = ()
    sessions: tuple[Session, ...] = ()
    patients: tuple[Patient, ...] | None = field(default=None)

    def __post_init__(self) -> None:
        # Accept any iterable from callers, store tuples
        for name in ("employees", "rooms", "activities", "sessions"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        if self.patients is not None:
            object.__setattr__(self, "patients", tuple(self.patients))

    @cached_property
    def employees_by_id(self) -> dict[str, Employee]:
        return {e.id: e for e in self.employees}

    @cached_property
    def rooms_by_id(self) -> dict[str, Room]:
        return {r.id: r for r in self.rooms}

    @cached_property
    def patients_by_id(self) -> dict[str, Patient] | None:
        if self.patients is None:
            return None
        return {p.id: p for p in self.patients}


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class ValidationConfig(BaseModel):
    """
    @brief
    Controls behavior of the report writer.

    @details
    Determines whether the CLI persists a validation report next to its output.
    """

    write_report: bool = True


class EngineConfig(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.

    @details
    Thresholds of the patient consecutive-session rule, message language,
    and output settings. Defaults reproduce the clinic's standing policy:
    a gap under 15 minutes chains sessions, and more than 2 chained sessions
    raises a warning.
    """

    consecutive_break_minutes: int = Field(
        15, ge=0, description="Gap (minutes) at or above which sessions are not consecutive"
    )
    max_consecutive_sessions: int = Field(
        2, ge=1, description="Longest allowed chain of back-to-back patient sessions"
    )
    locale: Literal["he", "en"] = Field("he", description="Language of result messages")
    output_dir: str | None = "data/output"
    validation: ValidationConfig = Field(default_factory=ValidationConfig)


__all__ = [
    "WeekDay",
    "ALL_DAYS",
    "WEEK_DAYS",
    "TimeRange",
    "DayOverride",
    "Role",
    "Employee",
    "Room",
    "Patient",
    "Activity",
    "Session",
    "SessionUpdate",
    "Schedule",
    "ScheduleScope",
    "ValidationConfig",
    "EngineConfig",
]
