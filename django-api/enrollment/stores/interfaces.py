"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Capacity counters are only
written through LedgerStore; SessionStore never touches them.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime

from enrollment.domain import (
    ClassSession,
    Enrollment,
    EnrollmentId,
    EnrollmentStatus,
    Program,
    ProgramId,
    Reservation,
    ReservationId,
    SeatKind,
    SessionId,
    SessionScope,
)


class StoreUnavailable(Exception):
    """Raised by a store when its backing data source cannot be reached."""


class SessionHasReservations(Exception):
    """Raised by a store asked to delete a session that still holds active seats."""


@dataclass(frozen=True)
class SeatCount:
    """Capacity counters for one seat pool after a ledger operation."""

    available: int
    total: int


class ProgramStore(ABC):
    """Interface for program lookups."""

    @abstractmethod
    def get_program(self, program_id: ProgramId) -> Program | None:
        """Return a program with its offering, or None if not found."""
        ...


class SessionStore(ABC):
    """Interface for class session persistence, capacity counters excluded."""

    @abstractmethod
    def list_sessions(self, scope: SessionScope) -> list[ClassSession]:
        """Return sessions matching scope, ordered by weekday then start_time."""
        ...

    @abstractmethod
    def get_session(self, session_id: SessionId) -> ClassSession | None:
        """Return a session by ID, or None if not found."""
        ...

    @abstractmethod
    def add_session(self, session: ClassSession) -> ClassSession:
        """Persist a new session, counters included, and return it."""
        ...

    @abstractmethod
    def update_session(self, session_id: SessionId, **changes) -> ClassSession:
        """Update schedule fields of a session. Capacity fields are rejected."""
        ...

    @abstractmethod
    def delete_session(self, session_id: SessionId) -> bool:
        """Delete a session and its released reservation history.

        Returns False if it did not exist. Raises SessionHasReservations
        while any of its reservations is still active.
        """
        ...


class LedgerStore(ABC):
    """Interface for seat counters and the reservations that move them."""

    @abstractmethod
    def take_seat(self, session_id: SessionId, kind: SeatKind) -> bool:
        """Atomically decrement the pool if a seat is left. Returns success."""
        ...

    @abstractmethod
    def return_seat(self, session_id: SessionId, kind: SeatKind) -> bool:
        """Atomically increment the pool unless it is already at its total."""
        ...

    @abstractmethod
    def resize_pool(
        self, session_id: SessionId, kind: SeatKind, total: int
    ) -> SeatCount | None:
        """Set a pool's total, shifting available by the same difference, clamped.

        Returns None if the session does not exist.
        """
        ...

    @abstractmethod
    def add_reservation(self, reservation: Reservation) -> Reservation:
        ...

    @abstractmethod
    def get_reservation(self, reservation_id: ReservationId) -> Reservation | None:
        ...

    @abstractmethod
    def mark_released(self, reservation_id: ReservationId, released_at: datetime) -> bool:
        """Flip an active reservation to released. Returns False if it was not active."""
        ...

    @abstractmethod
    def attach_reservations(
        self, reservation_ids: list[ReservationId], enrollment_id: EnrollmentId
    ) -> None:
        ...

    @abstractmethod
    def has_active_reservations(self, session_id: SessionId) -> bool:
        ...


class EnrollmentStore(ABC):
    """Interface for enrollment persistence."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Unit of work wrapping reservation and enrollment creation."""
        ...

    @abstractmethod
    def add_enrollment(self, enrollment: Enrollment) -> Enrollment:
        ...

    @abstractmethod
    def get_enrollment(self, enrollment_id: EnrollmentId) -> Enrollment | None:
        ...

    @abstractmethod
    def list_enrollments(self, program_id: ProgramId | None = None) -> list[Enrollment]:
        """Return enrollments ordered by created_at descending."""
        ...

    @abstractmethod
    def set_enrollment_status(
        self, enrollment_id: EnrollmentId, status: EnrollmentStatus
    ) -> Enrollment:
        ...
