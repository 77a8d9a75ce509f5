"""Enrollment service - all enrollment business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from enrollment.domain import (
    ClassSession,
    Enrollment,
    EnrollmentId,
    EnrollmentStatus,
    Program,
    ProgramId,
    Reservation,
    SessionId,
    SessionScope,
    StudentInfo,
    required_session_count,
)
from enrollment.domain.errors import (
    DomainError,
    EnrollmentNotFoundError,
    IncompleteSelectionError,
    ProgramNotFoundError,
    SelectionLimitReachedError,
    ValidationError,
)
from enrollment.services.capacity_ledger import CapacityLedger
from enrollment.services.parsing import parse_id
from enrollment.services.session_directory import SessionDirectory
from enrollment.stores.interfaces import EnrollmentStore, ProgramStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EnrollmentService:
    """Service for program lookups and enrollment creation."""

    def __init__(
        self,
        programs: ProgramStore,
        enrollments: EnrollmentStore,
        directory: SessionDirectory,
        ledger: CapacityLedger,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._programs = programs
        self._enrollments = enrollments
        self._directory = directory
        self._ledger = ledger
        self._clock = clock

    @property
    def directory(self) -> SessionDirectory:
        return self._directory

    @property
    def ledger(self) -> CapacityLedger:
        return self._ledger

    def get_program(self, program_id: str) -> Program:
        """Return a program with its offering.

        Raises:
            InvalidIdError: If the program_id is not a valid UUID.
            ProgramNotFoundError: If the program does not exist.
        """
        parsed = parse_id(ProgramId, program_id, "program")
        program = self._programs.get_program(parsed)
        if program is None:
            raise ProgramNotFoundError(str(parsed))
        return program

    def list_sessions(self, scope: SessionScope) -> list[ClassSession]:
        return self._directory.list_sessions(scope)

    def sessions_for_program(self, program_id: str) -> tuple[Program, list[ClassSession]]:
        """Return a program and the sessions its students may pick from."""
        program = self.get_program(program_id)
        return program, self._directory.list_sessions(SessionScope.of(program))

    def create_enrollment(
        self, program_id: str, student: StudentInfo, session_ids: list[str]
    ) -> Enrollment:
        """Enroll a student, taking one seat in every chosen session.

        Either every seat is reserved and the enrollment is created, or
        nothing is. Seats taken before a domain error are released again;
        any other error is left to the store transaction to roll back.

        Raises:
            InvalidIdError: If an ID is not a valid UUID.
            ProgramNotFoundError: If the program does not exist.
            ValidationError: If student details are missing, a session is
                repeated, or a session is not offered for the program.
            IncompleteSelectionError: If fewer sessions than required are given.
            SelectionLimitReachedError: If more sessions than allowed are given.
            SessionNotFoundError: If a session does not exist.
            SessionFullError: If a chosen session has no seat left.
        """
        program = self.get_program(program_id)
        missing = student.missing_fields()
        if missing:
            raise ValidationError("Please fill all student information fields.")

        parsed = [parse_id(SessionId, session_id, "session") for session_id in session_ids]
        if len(set(parsed)) != len(parsed):
            raise ValidationError("Each class session can only be selected once.")
        required = required_session_count(program)
        if len(parsed) < required:
            raise IncompleteSelectionError(required, len(parsed))
        if len(parsed) > required:
            raise SelectionLimitReachedError(required)

        scope = SessionScope.of(program)
        for session_id in parsed:
            session = self._directory.get_session(str(session_id))
            if not scope.includes(session):
                raise ValidationError("This class session is not offered for the selected program.")

        with self._enrollments.atomic():
            reservations: list[Reservation] = []
            try:
                for session_id in parsed:
                    reservations.append(self._ledger.reserve(session_id))
                enrollment = self._enrollments.add_enrollment(
                    Enrollment(
                        id=EnrollmentId(uuid.uuid4()),
                        program_id=program.id,
                        student=student,
                        session_ids=tuple(parsed),
                        reservation_ids=tuple(reservation.id for reservation in reservations),
                        status=EnrollmentStatus.ACTIVE,
                        created_at=self._clock(),
                    )
                )
                self._ledger.assign(reservations, enrollment.id)
            except DomainError:
                for reservation in reversed(reservations):
                    self._ledger.release(reservation.id)
                logger.warning(
                    "Enrollment in program %s rolled back after %d reservation(s)",
                    program.id,
                    len(reservations),
                )
                raise
            except Exception:
                # The transaction may be broken; its rollback returns the seats.
                logger.exception("Enrollment in program %s failed", program.id)
                raise

        logger.info(
            "Enrolled %s %s in program %s (enrollment %s, %d session(s))",
            student.first_name,
            student.last_name,
            program.id,
            enrollment.id,
            len(parsed),
        )
        return enrollment

    def get_enrollment(self, enrollment_id: str) -> Enrollment:
        """Return an enrollment by ID.

        Raises:
            InvalidIdError: If the enrollment_id is not a valid UUID.
            EnrollmentNotFoundError: If the enrollment does not exist.
        """
        parsed = parse_id(EnrollmentId, enrollment_id, "enrollment")
        enrollment = self._enrollments.get_enrollment(parsed)
        if enrollment is None:
            raise EnrollmentNotFoundError(str(parsed))
        return enrollment

    def list_enrollments(self, program_id: str | None = None) -> list[Enrollment]:
        parsed = parse_id(ProgramId, program_id, "program") if program_id else None
        return self._enrollments.list_enrollments(parsed)

    def cancel_enrollment(self, enrollment_id: str) -> Enrollment:
        """Cancel an enrollment and give its seats back. Cancelling twice is a no-op."""
        enrollment = self.get_enrollment(enrollment_id)
        if enrollment.status is EnrollmentStatus.CANCELLED:
            return enrollment
        with self._enrollments.atomic():
            for reservation_id in enrollment.reservation_ids:
                self._ledger.release(reservation_id)
            cancelled = self._enrollments.set_enrollment_status(
                enrollment.id, EnrollmentStatus.CANCELLED
            )
        logger.info("Cancelled enrollment %s", enrollment.id)
        return cancelled
