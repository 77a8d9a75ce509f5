"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in enrollment/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from enrollment.domain.value_objects import (
    Cadence,
    Capacity,
    EnrollmentId,
    OfferingId,
    OfferingKind,
    ProgramId,
    ReservationId,
    SeatKind,
    SessionId,
    SessionType,
    TimeOfDay,
    Weekday,
)


@dataclass(frozen=True)
class Offering:
    """Domain representation of an Offering (product category)."""

    id: OfferingId
    name: str
    description: str = ""


@dataclass(frozen=True)
class Program:
    """Domain representation of a Program.

    ``offering_kind`` and ``cadence`` are classified once from the offering
    and program names when the object is built, so callers never re-derive
    them from free text.
    """

    id: ProgramId
    name: str
    offering: Offering
    description: str = ""
    offering_kind: OfferingKind = field(init=False)
    cadence: Cadence = field(init=False)

    def __post_init__(self) -> None:
        kind = OfferingKind.MARATHON if "Marathon" in self.offering.name else OfferingKind.SPRINT
        cadence = Cadence.TWICE_WEEKLY if "twice" in self.name.lower() else Cadence.ONCE_WEEKLY
        object.__setattr__(self, "offering_kind", kind)
        object.__setattr__(self, "cadence", cadence)

    @property
    def is_marathon(self) -> bool:
        return self.offering_kind is OfferingKind.MARATHON


@dataclass(frozen=True)
class ClassSession:
    """Domain representation of a recurring weekly class slot."""

    id: SessionId
    program_id: ProgramId | None
    weekday: Weekday
    start_time: TimeOfDay
    end_time: TimeOfDay
    type: SessionType
    regular_capacity: Capacity
    available_capacity: Capacity
    capacity_demo: Capacity = Capacity(0)
    available_demo_capacity: Capacity = Capacity(0)

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        if self.available_capacity.value > self.regular_capacity.value:
            raise ValueError("Available capacity cannot exceed regular capacity")
        if self.available_demo_capacity.value > self.capacity_demo.value:
            raise ValueError("Available demo capacity cannot exceed demo capacity")

    @property
    def is_program_scoped(self) -> bool:
        return self.program_id is not None

    @property
    def sort_key(self) -> tuple[int, TimeOfDay]:
        return (self.weekday.index, self.start_time)

    def available(self, kind: SeatKind) -> int:
        if kind is SeatKind.DEMO:
            return self.available_demo_capacity.value
        return self.available_capacity.value

    def total(self, kind: SeatKind) -> int:
        if kind is SeatKind.DEMO:
            return self.capacity_demo.value
        return self.regular_capacity.value


class ReservationStatus(Enum):
    ACTIVE = "active"
    RELEASED = "released"


@dataclass(frozen=True)
class Reservation:
    """One seat taken from a session's capacity."""

    id: ReservationId
    session_id: SessionId
    seat_kind: SeatKind
    status: ReservationStatus
    created_at: datetime
    enrollment_id: EnrollmentId | None = None
    released_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status is ReservationStatus.ACTIVE


@dataclass(frozen=True)
class StudentInfo:
    """Student details captured by the enrollment form."""

    first_name: str
    last_name: str
    date_of_birth: date | None

    def missing_fields(self) -> list[str]:
        missing = []
        if not (self.first_name or "").strip():
            missing.append("first_name")
        if not (self.last_name or "").strip():
            missing.append("last_name")
        if not self.date_of_birth:
            missing.append("date_of_birth")
        return missing


class EnrollmentStatus(Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Enrollment:
    """Domain representation of an Enrollment."""

    id: EnrollmentId
    program_id: ProgramId
    student: StudentInfo
    session_ids: tuple[SessionId, ...]
    reservation_ids: tuple[ReservationId, ...]
    status: EnrollmentStatus
    created_at: datetime
