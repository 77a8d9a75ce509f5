from enrollment.domain.models import (
    ClassSession,
    Enrollment,
    EnrollmentStatus,
    Offering,
    Program,
    Reservation,
    ReservationStatus,
    StudentInfo,
)
from enrollment.domain.policy import required_session_count
from enrollment.domain.scope import ScopeKind, SessionScope
from enrollment.domain.selection import SelectionSet, SelectionState
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
from enrollment.domain.wizard import EnrollmentWizard, WizardStep

__all__ = [
    "Offering",
    "Program",
    "ClassSession",
    "Reservation",
    "ReservationStatus",
    "Enrollment",
    "EnrollmentStatus",
    "StudentInfo",
    "SessionScope",
    "ScopeKind",
    "SelectionSet",
    "SelectionState",
    "EnrollmentWizard",
    "WizardStep",
    "required_session_count",
    "OfferingId",
    "ProgramId",
    "SessionId",
    "ReservationId",
    "EnrollmentId",
    "Capacity",
    "Weekday",
    "SessionType",
    "SeatKind",
    "OfferingKind",
    "Cadence",
    "TimeOfDay",
]
