"""
Typed records threaded through admission, conflict detection and assignment.

Built once at the storage boundary (ORM rows or in-memory fixtures) and never mutated:
updates produce a new record via dataclasses.replace. __post_init__ rejects values the
algorithms cannot work with, so the scan/assign path can trust every field.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class AssignmentType(str, Enum):
    MANUAL = "manual"
    AUTO = "auto"
    AUTO_REASSIGN = "auto_reassign"
    AUTO_CONFLICT_RESOLVED = "auto_conflict_resolved"


class AdmissionReason(str, Enum):
    CLOSED_SPECIAL_PERIOD = "closed_special_period"
    CLOSED_WEEKDAY = "closed_weekday"
    OUTSIDE_HOURS = "outside_hours"
    WITHIN_CUTOFF = "within_cutoff"


def _check_weekday(day_of_week: int) -> None:
    if not 0 <= day_of_week <= 6:
        raise ValueError(f"day_of_week must be 0..6 (0 = Sunday), got {day_of_week}")


@dataclass(frozen=True)
class Table:
    id: int
    restaurant_id: int
    number: int
    capacity: int
    is_active: bool = True

    def __post_init__(self):
        if self.capacity <= 0:
            raise ValueError(f"Table {self.id}: capacity must be positive, got {self.capacity}")


@dataclass(frozen=True)
class Booking:
    id: int
    restaurant_id: int
    tenant_id: int
    party_size: int
    booking_date: date
    start_time: time
    end_time: time | None = None
    status: BookingStatus = BookingStatus.CONFIRMED
    table_id: int | None = None
    assigned_at: datetime | None = None
    assignment_type: AssignmentType | None = None
    customer_name: str | None = None

    def __post_init__(self):
        if self.party_size <= 0:
            raise ValueError(f"Booking {self.id}: party size must be positive, got {self.party_size}")
        # Accept raw strings from the boundary; store enums
        object.__setattr__(self, "status", BookingStatus(self.status))
        if self.assignment_type is not None:
            object.__setattr__(self, "assignment_type", AssignmentType(self.assignment_type))

    @property
    def is_confirmed(self) -> bool:
        return self.status is BookingStatus.CONFIRMED


@dataclass(frozen=True)
class OpeningHours:
    day_of_week: int  # 0 = Sunday
    is_open: bool
    open_time: time
    close_time: time

    def __post_init__(self):
        _check_weekday(self.day_of_week)


@dataclass(frozen=True)
class SpecialPeriod:
    start_date: date
    end_date: date
    is_open: bool
    open_time: time | None = None
    close_time: time | None = None
    name: str = ""

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError(f"Special period {self.name!r}: end_date {self.end_date} before start_date {self.start_date}")

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @property
    def has_override_hours(self) -> bool:
        return self.open_time is not None and self.close_time is not None


@dataclass(frozen=True)
class CutOffTime:
    hours: int
    minutes: int = 0
    day_of_week: int | None = None  # None = every day
    is_enabled: bool = True

    def __post_init__(self):
        if self.hours < 0 or self.minutes < 0:
            raise ValueError(f"Cut-off must be non-negative, got {self.hours}h {self.minutes}m")
        if self.day_of_week is not None:
            _check_weekday(self.day_of_week)

    @property
    def lead_minutes(self) -> int:
        return self.hours * 60 + self.minutes


@dataclass(frozen=True)
class AvailabilityRules:
    """Everything AdmissionValidator needs for one restaurant."""
    opening_hours: tuple[OpeningHours, ...] = ()
    special_periods: tuple[SpecialPeriod, ...] = ()
    cut_off_times: tuple[CutOffTime, ...] = ()


@dataclass(frozen=True)
class AdmissionResult:
    admissible: bool
    reason: AdmissionReason | None = None

    def to_dict(self) -> dict:
        return {"admissible": self.admissible, "reason": self.reason.value if self.reason else None}


ADMISSIBLE = AdmissionResult(admissible=True)


@dataclass(frozen=True)
class AssignmentLogEntry:
    """Audit record: the only contract with the monitoring collaborator."""
    booking_id: int
    table_id: int
    assignment_type: AssignmentType
    assigned_at: datetime

    def to_dict(self) -> dict:
        return {
            "booking_id": self.booking_id,
            "table_id": self.table_id,
            "assignment_type": self.assignment_type.value,
            "assigned_at": self.assigned_at.isoformat(),
        }


@dataclass
class AssignmentRunReport:
    """Summary of one scheduler cycle."""
    started_at: datetime
    finished_at: datetime | None = None
    skipped: bool = False
    scanned: int = 0
    eligible: int = 0
    assigned: list[int] = field(default_factory=list)
    conflict_resolved: list[int] = field(default_factory=list)
    relocated: list[int] = field(default_factory=list)
    unresolved: list[int] = field(default_factory=list)
    no_capacity: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "skipped": self.skipped,
            "scanned": self.scanned,
            "eligible": self.eligible,
            "assigned": list(self.assigned),
            "conflict_resolved": list(self.conflict_resolved),
            "relocated": list(self.relocated),
            "unresolved": list(self.unresolved),
            "no_capacity": list(self.no_capacity),
            "failed": list(self.failed),
            "error": self.error,
        }
