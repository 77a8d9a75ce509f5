"""Session directory - listing and administering class sessions.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
import uuid
from dataclasses import replace

from enrollment.domain import (
    Capacity,
    ClassSession,
    Program,
    ProgramId,
    SessionId,
    SessionScope,
    SessionType,
    TimeOfDay,
    Weekday,
)
from enrollment.domain.errors import (
    NotAvailableError,
    ProgramNotFoundError,
    SessionInUseError,
    SessionNotFoundError,
    ValidationError,
)
from enrollment.services.capacity_ledger import CapacityLedger
from enrollment.services.parsing import parse_id, parse_value
from enrollment.stores.interfaces import (
    ProgramStore,
    SessionHasReservations,
    SessionStore,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

CAPACITY_FIELDS = ("regular_capacity", "capacity_demo")


def _parse_capacity(value) -> Capacity:
    if isinstance(value, bool):
        raise ValueError("Capacities must be non-negative whole numbers")
    try:
        return Capacity(value)
    except ValueError:
        raise ValueError("Capacities must be non-negative whole numbers") from None


class SessionDirectory:
    """Service for class session lookups and administration."""

    def __init__(
        self, sessions: SessionStore, programs: ProgramStore, ledger: CapacityLedger
    ) -> None:
        self._sessions = sessions
        self._programs = programs
        self._ledger = ledger

    def list_sessions(self, scope: SessionScope) -> list[ClassSession]:
        """Return sessions in scope, ordered by weekday then start time.

        Raises:
            NotAvailableError: If the session data cannot be fetched.
        """
        try:
            return self._sessions.list_sessions(scope)
        except StoreUnavailable as exc:
            logger.error("Class sessions for %s unavailable: %s", scope, exc)
            raise NotAvailableError() from exc

    def scope_for(self, program: Program) -> SessionScope:
        return SessionScope.of(program)

    def get_session(self, session_id: str) -> ClassSession:
        """Return a session by ID.

        Raises:
            InvalidIdError: If the session_id is not a valid UUID.
            SessionNotFoundError: If the session does not exist.
            NotAvailableError: If the session data cannot be fetched.
        """
        parsed = parse_id(SessionId, session_id, "session")
        try:
            session = self._sessions.get_session(parsed)
        except StoreUnavailable as exc:
            logger.error("Class session %s unavailable: %s", parsed, exc)
            raise NotAvailableError() from exc
        if session is None:
            raise SessionNotFoundError(str(parsed))
        return session

    def add_session(
        self,
        *,
        weekday: str,
        start_time: str,
        end_time: str,
        type: str,
        regular_capacity: int,
        capacity_demo: int = 0,
        program_id: str | None = None,
    ) -> ClassSession:
        """Create a session with every seat available.

        Raises:
            ValidationError: If a field is malformed or the slot already exists.
            InvalidIdError: If program_id is not a valid UUID.
            ProgramNotFoundError: If program_id names no program.
        """
        program = self._resolve_program(program_id)
        try:
            regular = _parse_capacity(regular_capacity)
            demo = _parse_capacity(capacity_demo)
            session = ClassSession(
                id=SessionId(uuid.uuid4()),
                program_id=program,
                weekday=Weekday.parse(weekday),
                start_time=TimeOfDay.parse(start_time),
                end_time=TimeOfDay.parse(end_time),
                type=SessionType.parse(type),
                regular_capacity=regular,
                available_capacity=regular,
                capacity_demo=demo,
                available_demo_capacity=demo,
            )
            created = self._sessions.add_session(session)
        except (TypeError, ValueError) as exc:
            raise ValidationError(str(exc)) from None
        logger.info(
            "Added class session %s on %s %s-%s",
            created.id,
            created.weekday.value,
            created.start_time,
            created.end_time,
        )
        return created

    def update_session(self, session_id: str, **changes) -> ClassSession:
        """Update a session's schedule; capacity totals go through the ledger.

        Raises:
            InvalidIdError: If an ID is not a valid UUID.
            SessionNotFoundError: If the session does not exist.
            ProgramNotFoundError: If a new program_id names no program.
            ValidationError: If a field is malformed or unknown.
        """
        current = self.get_session(session_id)
        capacities = {name: changes.pop(name) for name in CAPACITY_FIELDS if name in changes}

        schedule = {}
        if "program_id" in changes:
            schedule["program_id"] = self._resolve_program(changes.pop("program_id"))
        parsers = {
            "weekday": Weekday.parse,
            "start_time": TimeOfDay.parse,
            "end_time": TimeOfDay.parse,
            "type": SessionType.parse,
        }
        for name, parser in parsers.items():
            if name in changes:
                schedule[name] = parse_value(parser, changes.pop(name))
        if changes:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(changes))}")

        for name, value in capacities.items():
            capacities[name] = parse_value(_parse_capacity, value).value

        if schedule:
            try:
                replace(current, **schedule)
                self._sessions.update_session(current.id, **schedule)
            except ValueError as exc:
                raise ValidationError(str(exc)) from None
        if capacities:
            return self._ledger.resize(current.id, **capacities)
        logger.info("Updated class session %s", current.id)
        return self.get_session(str(current.id))

    def delete_session(self, session_id: str) -> None:
        """Delete a session that no enrollment is holding a seat in.

        Released reservation history for the session is removed with it.

        Raises:
            InvalidIdError: If the session_id is not a valid UUID.
            SessionNotFoundError: If the session does not exist.
            SessionInUseError: If the session still has active reservations.
        """
        session = self.get_session(session_id)
        if self._ledger.has_active_reservations(session.id):
            raise SessionInUseError(str(session.id))
        try:
            deleted = self._sessions.delete_session(session.id)
        except SessionHasReservations:
            raise SessionInUseError(str(session.id)) from None
        if not deleted:
            raise SessionNotFoundError(str(session.id))
        logger.info("Deleted class session %s", session.id)

    def _resolve_program(self, program_id: str | None) -> ProgramId | None:
        if program_id in (None, ""):
            return None
        parsed = parse_id(ProgramId, program_id, "program")
        if self._programs.get_program(parsed) is None:
            raise ProgramNotFoundError(str(parsed))
        return parsed
