"""Capacity ledger - the only code allowed to move seat counters."""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from enrollment.domain import (
    ClassSession,
    EnrollmentId,
    Reservation,
    ReservationId,
    ReservationStatus,
    SeatKind,
    SessionId,
)
from enrollment.domain.errors import (
    ReservationNotFoundError,
    SessionFullError,
    SessionNotFoundError,
    ValidationError,
)
from enrollment.services.parsing import parse_id
from enrollment.stores.interfaces import LedgerStore, SessionStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CapacityLedger:
    """Reserves and releases seats in class sessions.

    ``reserve`` is a check-and-decrement performed by the store in one atomic
    step, so concurrent callers can never take more seats than exist.
    ``release`` gives one seat back, never past the pool's total.
    """

    def __init__(
        self,
        store: LedgerStore,
        sessions: SessionStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._sessions = sessions
        self._clock = clock

    def reserve(
        self, session_id: SessionId | str, seat_kind: SeatKind = SeatKind.REGULAR
    ) -> Reservation:
        """Take one seat from a session.

        Raises:
            InvalidIdError: If the session_id is not a valid UUID.
            SessionNotFoundError: If the session does not exist.
            SessionFullError: If no seat is left. Nothing is changed.
        """
        session_id = parse_id(SessionId, session_id, "session")
        if not self._store.take_seat(session_id, seat_kind):
            if self._sessions.get_session(session_id) is None:
                raise SessionNotFoundError(str(session_id))
            logger.warning("No %s seat left in session %s", seat_kind.value, session_id)
            raise SessionFullError(str(session_id))

        reservation = self._store.add_reservation(
            Reservation(
                id=ReservationId(uuid.uuid4()),
                session_id=session_id,
                seat_kind=seat_kind,
                status=ReservationStatus.ACTIVE,
                created_at=self._clock(),
            )
        )
        logger.info(
            "Reserved %s seat in session %s (reservation %s)",
            seat_kind.value,
            session_id,
            reservation.id,
        )
        return reservation

    def release(self, reservation_id: ReservationId | str) -> Reservation:
        """Give a reserved seat back. Releasing twice is a no-op.

        Raises:
            InvalidIdError: If the reservation_id is not a valid UUID.
            ReservationNotFoundError: If the reservation does not exist.
        """
        reservation_id = parse_id(ReservationId, reservation_id, "reservation")
        reservation = self._store.get_reservation(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(str(reservation_id))
        if not reservation.is_active:
            return reservation
        if not self._store.mark_released(reservation_id, self._clock()):
            return self._store.get_reservation(reservation_id)

        if self._store.return_seat(reservation.session_id, reservation.seat_kind):
            logger.info(
                "Released %s seat in session %s (reservation %s)",
                reservation.seat_kind.value,
                reservation.session_id,
                reservation_id,
            )
        else:
            logger.warning(
                "Session %s already at full %s capacity, reservation %s released without a seat",
                reservation.session_id,
                reservation.seat_kind.value,
                reservation_id,
            )
        return self._store.get_reservation(reservation_id)

    def resize(
        self,
        session_id: SessionId | str,
        regular_capacity: int | None = None,
        capacity_demo: int | None = None,
    ) -> ClassSession:
        """Change a session's seat totals, moving available seats by the same amount.

        Raises:
            ValidationError: If a capacity is negative or not an integer.
            SessionNotFoundError: If the session does not exist.
        """
        session_id = parse_id(SessionId, session_id, "session")
        pools = [
            (kind, total)
            for kind, total in ((SeatKind.REGULAR, regular_capacity), (SeatKind.DEMO, capacity_demo))
            if total is not None
        ]
        for _, total in pools:
            if isinstance(total, bool) or not isinstance(total, int) or total < 0:
                raise ValidationError("Capacities must be non-negative whole numbers")
        for kind, total in pools:
            count = self._store.resize_pool(session_id, kind, total)
            if count is None:
                raise SessionNotFoundError(str(session_id))
            logger.info(
                "Resized %s pool of session %s to %d (%d available)",
                kind.value,
                session_id,
                count.total,
                count.available,
            )
        session = self._sessions.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(str(session_id))
        return session

    def has_active_reservations(self, session_id: SessionId) -> bool:
        return self._store.has_active_reservations(session_id)

    def assign(self, reservations: list[Reservation], enrollment_id: EnrollmentId) -> None:
        """Record which enrollment holds the given seats."""
        self._store.attach_reservations(
            [reservation.id for reservation in reservations], enrollment_id
        )
