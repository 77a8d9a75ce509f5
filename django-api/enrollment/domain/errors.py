"""Domain error codes for the enrollment module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_AVAILABLE = "NOT_AVAILABLE"
    SESSION_FULL = "SESSION_FULL"
    SELECTION_LIMIT_REACHED = "SELECTION_LIMIT_REACHED"
    INCOMPLETE_SELECTION = "INCOMPLETE_SELECTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ID = "INVALID_ID"
    PROGRAM_NOT_FOUND = "PROGRAM_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    ENROLLMENT_NOT_FOUND = "ENROLLMENT_NOT_FOUND"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    SESSION_IN_USE = "SESSION_IN_USE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    retriable = False

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotAvailableError(DomainError):
    """Raised when session data cannot be fetched. The caller may retry."""

    retriable = True

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_AVAILABLE,
            message="Failed to load available class sessions. Please try again.",
        )


class SessionFullError(DomainError):
    """Raised when a session has no seat left in the requested pool."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_FULL,
            message="This class session is full. Please choose a different session.",
        )
        self.session_id = session_id


class SelectionLimitReachedError(DomainError):
    """Raised when a user tries to pick more sessions than the program allows."""

    def __init__(self, limit: int) -> None:
        plural = "s" if limit > 1 else ""
        super().__init__(
            code=ErrorCode.SELECTION_LIMIT_REACHED,
            message=f"You can only select {limit} session{plural} for this program.",
        )
        self.limit = limit


class IncompleteSelectionError(DomainError):
    """Raised when advancing without exactly the required number of sessions."""

    def __init__(self, required: int, selected: int) -> None:
        plural = "s" if required > 1 else ""
        super().__init__(
            code=ErrorCode.INCOMPLETE_SELECTION,
            message=(
                f"Please select {required} session{plural} to continue "
                f"({selected} selected)."
            ),
        )
        self.required = required
        self.selected = selected

    @property
    def shortfall(self) -> int:
        return self.required - self.selected


class ValidationError(DomainError):
    """Raised when required input is missing or malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )
        self.kind = kind


class ProgramNotFoundError(DomainError):
    def __init__(self, program_id: str) -> None:
        super().__init__(code=ErrorCode.PROGRAM_NOT_FOUND, message="Program not found")
        self.program_id = program_id


class SessionNotFoundError(DomainError):
    def __init__(self, session_id: str) -> None:
        super().__init__(code=ErrorCode.SESSION_NOT_FOUND, message="Class session not found")
        self.session_id = session_id


class EnrollmentNotFoundError(DomainError):
    def __init__(self, enrollment_id: str) -> None:
        super().__init__(code=ErrorCode.ENROLLMENT_NOT_FOUND, message="Enrollment not found")
        self.enrollment_id = enrollment_id


class ReservationNotFoundError(DomainError):
    def __init__(self, reservation_id: str) -> None:
        super().__init__(code=ErrorCode.RESERVATION_NOT_FOUND, message="Reservation not found")
        self.reservation_id = reservation_id


class SessionInUseError(DomainError):
    """Raised when deleting a session that still holds active reservations."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_IN_USE,
            message="Class session has active enrollments and cannot be deleted",
        )
        self.session_id = session_id
