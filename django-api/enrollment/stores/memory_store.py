"""In-process store used for fixtures, tests and local tooling.

Each session's counters are guarded by their own lock, which gives the same
at-most-available guarantee as the conditional UPDATE in the Django store.
"""

import threading
from collections import defaultdict
from contextlib import AbstractContextManager, nullcontext
from dataclasses import replace
from datetime import datetime

from enrollment.domain import (
    Capacity,
    ClassSession,
    Enrollment,
    EnrollmentId,
    EnrollmentStatus,
    Program,
    ProgramId,
    Reservation,
    ReservationId,
    ReservationStatus,
    SeatKind,
    SessionId,
    SessionScope,
)
from enrollment.stores.interfaces import (
    EnrollmentStore,
    LedgerStore,
    ProgramStore,
    SeatCount,
    SessionHasReservations,
    SessionStore,
    StoreUnavailable,
)

SCHEDULE_FIELDS = frozenset({"program_id", "weekday", "start_time", "end_time", "type"})

_POOL_FIELDS = {
    SeatKind.REGULAR: ("available_capacity", "regular_capacity"),
    SeatKind.DEMO: ("available_demo_capacity", "capacity_demo"),
}


class InMemoryStore(ProgramStore, SessionStore, LedgerStore, EnrollmentStore):
    """Dictionary-backed implementation of every store interface."""

    def __init__(self) -> None:
        self._programs: dict[ProgramId, Program] = {}
        self._sessions: dict[SessionId, ClassSession] = {}
        self._reservations: dict[ReservationId, Reservation] = {}
        self._enrollments: dict[EnrollmentId, Enrollment] = {}
        self._registry_lock = threading.Lock()
        self._session_locks: defaultdict[SessionId, threading.Lock] = defaultdict(threading.Lock)
        self.available = True

    def load_programs(self, programs: list[Program]) -> None:
        for program in programs:
            self._programs[program.id] = program

    def _lock_for(self, session_id: SessionId) -> threading.Lock:
        with self._registry_lock:
            return self._session_locks[session_id]

    def _check_available(self) -> None:
        if not self.available:
            raise StoreUnavailable("in-memory store switched off")

    # Programs

    def get_program(self, program_id: ProgramId) -> Program | None:
        return self._programs.get(program_id)

    # Sessions

    def list_sessions(self, scope: SessionScope) -> list[ClassSession]:
        self._check_available()
        sessions = [session for session in self._sessions.values() if scope.includes(session)]
        return sorted(sessions, key=lambda session: session.sort_key)

    def get_session(self, session_id: SessionId) -> ClassSession | None:
        self._check_available()
        return self._sessions.get(session_id)

    def add_session(self, session: ClassSession) -> ClassSession:
        for existing in self._sessions.values():
            if (
                existing.program_id == session.program_id
                and existing.weekday == session.weekday
                and existing.start_time == session.start_time
                and existing.end_time == session.end_time
            ):
                raise ValueError("A class session with these details already exists")
        self._sessions[session.id] = session
        return session

    def update_session(self, session_id: SessionId, **changes) -> ClassSession:
        unknown = set(changes) - SCHEDULE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        with self._lock_for(session_id):
            session = replace(self._sessions[session_id], **changes)
            self._sessions[session_id] = session
        return session

    def delete_session(self, session_id: SessionId) -> bool:
        with self._lock_for(session_id):
            if self.has_active_reservations(session_id):
                raise SessionHasReservations(str(session_id))
            self._reservations = {
                reservation_id: reservation
                for reservation_id, reservation in self._reservations.items()
                if reservation.session_id != session_id
            }
            deleted = self._sessions.pop(session_id, None) is not None
        with self._registry_lock:
            self._session_locks.pop(session_id, None)
        return deleted

    # Ledger

    def take_seat(self, session_id: SessionId, kind: SeatKind) -> bool:
        available_field, _ = _POOL_FIELDS[kind]
        with self._lock_for(session_id):
            session = self._sessions.get(session_id)
            if session is None or session.available(kind) <= 0:
                return False
            self._sessions[session_id] = replace(
                session, **{available_field: Capacity(session.available(kind) - 1)}
            )
        return True

    def return_seat(self, session_id: SessionId, kind: SeatKind) -> bool:
        available_field, _ = _POOL_FIELDS[kind]
        with self._lock_for(session_id):
            session = self._sessions.get(session_id)
            if session is None or session.available(kind) >= session.total(kind):
                return False
            self._sessions[session_id] = replace(
                session, **{available_field: Capacity(session.available(kind) + 1)}
            )
        return True

    def resize_pool(
        self, session_id: SessionId, kind: SeatKind, total: int
    ) -> SeatCount | None:
        available_field, total_field = _POOL_FIELDS[kind]
        with self._lock_for(session_id):
            session = self._sessions.get(session_id)
            if session is None:
                return None
            current_total = session.total(kind)
            available = min(total, max(0, session.available(kind) + total - current_total))
            self._sessions[session_id] = replace(
                session,
                **{total_field: Capacity(total), available_field: Capacity(available)},
            )
        return SeatCount(available=available, total=total)

    def add_reservation(self, reservation: Reservation) -> Reservation:
        self._reservations[reservation.id] = reservation
        return reservation

    def get_reservation(self, reservation_id: ReservationId) -> Reservation | None:
        return self._reservations.get(reservation_id)

    def mark_released(self, reservation_id: ReservationId, released_at: datetime) -> bool:
        with self._registry_lock:
            reservation = self._reservations.get(reservation_id)
            if reservation is None or not reservation.is_active:
                return False
            self._reservations[reservation_id] = replace(
                reservation, status=ReservationStatus.RELEASED, released_at=released_at
            )
        return True

    def attach_reservations(
        self, reservation_ids: list[ReservationId], enrollment_id: EnrollmentId
    ) -> None:
        for reservation_id in reservation_ids:
            reservation = self._reservations[reservation_id]
            self._reservations[reservation_id] = replace(reservation, enrollment_id=enrollment_id)

    def has_active_reservations(self, session_id: SessionId) -> bool:
        return any(
            reservation.session_id == session_id and reservation.is_active
            for reservation in self._reservations.values()
        )

    # Enrollments

    def atomic(self) -> AbstractContextManager:
        return nullcontext()

    def add_enrollment(self, enrollment: Enrollment) -> Enrollment:
        self._enrollments[enrollment.id] = enrollment
        return enrollment

    def get_enrollment(self, enrollment_id: EnrollmentId) -> Enrollment | None:
        return self._enrollments.get(enrollment_id)

    def list_enrollments(self, program_id: ProgramId | None = None) -> list[Enrollment]:
        enrollments = [
            enrollment
            for enrollment in self._enrollments.values()
            if program_id is None or enrollment.program_id == program_id
        ]
        return sorted(enrollments, key=lambda enrollment: enrollment.created_at, reverse=True)

    def set_enrollment_status(
        self, enrollment_id: EnrollmentId, status: EnrollmentStatus
    ) -> Enrollment:
        enrollment = replace(self._enrollments[enrollment_id], status=status)
        self._enrollments[enrollment_id] = enrollment
        return enrollment
