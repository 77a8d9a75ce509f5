"""Django ORM implementation of the stores.

Seat counters are moved with single conditional UPDATE statements so two
requests racing for the last seat cannot both win.
"""

from contextlib import AbstractContextManager
from datetime import datetime

from django.db import IntegrityError, InterfaceError, OperationalError, transaction
from django.db.models import F, ProtectedError

from enrollment import models
from enrollment.domain import (
    Capacity,
    ClassSession,
    Enrollment,
    EnrollmentId,
    EnrollmentStatus,
    Offering,
    OfferingId,
    Program,
    ProgramId,
    Reservation,
    ReservationId,
    ReservationStatus,
    ScopeKind,
    SeatKind,
    SessionId,
    SessionScope,
    SessionType,
    StudentInfo,
    TimeOfDay,
    Weekday,
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


def _to_column(value):
    if isinstance(value, ProgramId):
        return value.value
    if isinstance(value, (Weekday, SessionType)):
        return value.value
    if isinstance(value, TimeOfDay):
        return str(value)
    return value


def _slot_taken(row: models.ClassSession) -> bool:
    # NULL program ids are distinct to the unique constraint, so the global
    # pool needs an explicit check.
    return (
        models.ClassSession.objects.filter(
            program_id=row.program_id,
            weekday=row.weekday,
            start_time=row.start_time,
            end_time=row.end_time,
        )
        .exclude(pk=row.pk)
        .exists()
    )


def _to_program(row: models.Program) -> Program:
    offering = row.offering
    return Program(
        id=ProgramId(row.id),
        name=row.name,
        description=row.description,
        offering=Offering(
            id=OfferingId(offering.id),
            name=offering.name,
            description=offering.description,
        ),
    )


def _to_session(row: models.ClassSession) -> ClassSession:
    return ClassSession(
        id=SessionId(row.id),
        program_id=ProgramId(row.program_id) if row.program_id else None,
        weekday=Weekday(row.weekday),
        start_time=TimeOfDay.parse(row.start_time),
        end_time=TimeOfDay.parse(row.end_time),
        type=SessionType(row.type),
        regular_capacity=Capacity(row.regular_capacity),
        available_capacity=Capacity(row.available_capacity),
        capacity_demo=Capacity(row.capacity_demo),
        available_demo_capacity=Capacity(row.available_demo_capacity),
    )


def _to_reservation(row: models.Reservation) -> Reservation:
    return Reservation(
        id=ReservationId(row.id),
        session_id=SessionId(row.session_id),
        seat_kind=SeatKind(row.seat_kind),
        status=ReservationStatus(row.status),
        created_at=row.created_at,
        enrollment_id=EnrollmentId(row.enrollment_id) if row.enrollment_id else None,
        released_at=row.released_at,
    )


def _to_enrollment(row: models.Enrollment) -> Enrollment:
    return Enrollment(
        id=EnrollmentId(row.id),
        program_id=ProgramId(row.program_id),
        student=StudentInfo(
            first_name=row.student_first_name,
            last_name=row.student_last_name,
            date_of_birth=row.student_date_of_birth,
        ),
        session_ids=tuple(SessionId.from_string(value) for value in row.session_ids),
        reservation_ids=tuple(
            ReservationId(reservation.id) for reservation in row.reservations.all()
        ),
        status=EnrollmentStatus(row.status),
        created_at=row.created_at,
    )


class DjangoStore(ProgramStore, SessionStore, LedgerStore, EnrollmentStore):
    """Database-backed store using Django ORM."""

    # Programs

    def get_program(self, program_id: ProgramId) -> Program | None:
        row = (
            models.Program.objects.select_related("offering")
            .filter(pk=program_id.value)
            .first()
        )
        return _to_program(row) if row else None

    # Sessions

    def list_sessions(self, scope: SessionScope) -> list[ClassSession]:
        queryset = models.ClassSession.objects.all()
        if scope.kind is ScopeKind.PROGRAM:
            queryset = queryset.filter(program_id=scope.program_id.value)
        elif scope.kind is ScopeKind.GLOBAL:
            queryset = queryset.filter(program__isnull=True)
        try:
            sessions = [_to_session(row) for row in queryset]
        except (OperationalError, InterfaceError) as exc:
            raise StoreUnavailable(str(exc)) from exc
        return sorted(sessions, key=lambda session: session.sort_key)

    def get_session(self, session_id: SessionId) -> ClassSession | None:
        try:
            row = models.ClassSession.objects.filter(pk=session_id.value).first()
        except (OperationalError, InterfaceError) as exc:
            raise StoreUnavailable(str(exc)) from exc
        return _to_session(row) if row else None

    def add_session(self, session: ClassSession) -> ClassSession:
        try:
            with transaction.atomic():
                row = models.ClassSession(
                    id=session.id.value,
                    program_id=session.program_id.value if session.program_id else None,
                    weekday=session.weekday.value,
                    start_time=str(session.start_time),
                    end_time=str(session.end_time),
                    type=session.type.value,
                    regular_capacity=session.regular_capacity.value,
                    available_capacity=session.available_capacity.value,
                    capacity_demo=session.capacity_demo.value,
                    available_demo_capacity=session.available_demo_capacity.value,
                )
                if _slot_taken(row):
                    raise IntegrityError("duplicate class session slot")
                row.save(force_insert=True)
        except IntegrityError as exc:
            raise ValueError("A class session with these details already exists") from exc
        return _to_session(row)

    def update_session(self, session_id: SessionId, **changes) -> ClassSession:
        unknown = set(changes) - SCHEDULE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        row = models.ClassSession.objects.get(pk=session_id.value)
        for name, value in changes.items():
            setattr(row, name, _to_column(value))
        update_fields = ["program" if name == "program_id" else name for name in changes]
        try:
            with transaction.atomic():
                if _slot_taken(row):
                    raise IntegrityError("duplicate class session slot")
                row.save(update_fields=[*update_fields, "updated_at"])
        except IntegrityError as exc:
            raise ValueError("A class session with these details already exists") from exc
        return _to_session(row)

    def delete_session(self, session_id: SessionId) -> bool:
        try:
            with transaction.atomic():
                models.Reservation.objects.filter(
                    session_id=session_id.value, status=models.Reservation.Status.RELEASED
                ).delete()
                deleted, _ = models.ClassSession.objects.filter(pk=session_id.value).delete()
        except ProtectedError as exc:
            raise SessionHasReservations(str(session_id)) from exc
        return deleted > 0

    # Ledger

    def take_seat(self, session_id: SessionId, kind: SeatKind) -> bool:
        available, _ = _POOL_FIELDS[kind]
        updated = models.ClassSession.objects.filter(
            pk=session_id.value, **{f"{available}__gt": 0}
        ).update(**{available: F(available) - 1})
        return updated == 1

    def return_seat(self, session_id: SessionId, kind: SeatKind) -> bool:
        available, total = _POOL_FIELDS[kind]
        updated = models.ClassSession.objects.filter(
            pk=session_id.value, **{f"{available}__lt": F(total)}
        ).update(**{available: F(available) + 1})
        return updated == 1

    def resize_pool(
        self, session_id: SessionId, kind: SeatKind, total: int
    ) -> SeatCount | None:
        available_field, total_field = _POOL_FIELDS[kind]
        with transaction.atomic():
            row = (
                models.ClassSession.objects.select_for_update()
                .filter(pk=session_id.value)
                .first()
            )
            if row is None:
                return None
            current_total = getattr(row, total_field)
            current_available = getattr(row, available_field)
            available = min(total, max(0, current_available + total - current_total))
            setattr(row, total_field, total)
            setattr(row, available_field, available)
            row.save(update_fields=[total_field, available_field, "updated_at"])
        return SeatCount(available=available, total=total)

    def add_reservation(self, reservation: Reservation) -> Reservation:
        row = models.Reservation.objects.create(
            id=reservation.id.value,
            session_id=reservation.session_id.value,
            seat_kind=reservation.seat_kind.value,
            status=reservation.status.value,
            created_at=reservation.created_at,
            enrollment_id=reservation.enrollment_id.value if reservation.enrollment_id else None,
        )
        return _to_reservation(row)

    def get_reservation(self, reservation_id: ReservationId) -> Reservation | None:
        row = models.Reservation.objects.filter(pk=reservation_id.value).first()
        return _to_reservation(row) if row else None

    def mark_released(self, reservation_id: ReservationId, released_at: datetime) -> bool:
        updated = models.Reservation.objects.filter(
            pk=reservation_id.value, status=models.Reservation.Status.ACTIVE
        ).update(status=models.Reservation.Status.RELEASED, released_at=released_at)
        return updated == 1

    def attach_reservations(
        self, reservation_ids: list[ReservationId], enrollment_id: EnrollmentId
    ) -> None:
        models.Reservation.objects.filter(
            pk__in=[reservation_id.value for reservation_id in reservation_ids]
        ).update(enrollment_id=enrollment_id.value)

    def has_active_reservations(self, session_id: SessionId) -> bool:
        return models.Reservation.objects.filter(
            session_id=session_id.value, status=models.Reservation.Status.ACTIVE
        ).exists()

    # Enrollments

    def atomic(self) -> AbstractContextManager:
        return transaction.atomic()

    def add_enrollment(self, enrollment: Enrollment) -> Enrollment:
        models.Enrollment.objects.create(
            id=enrollment.id.value,
            program_id=enrollment.program_id.value,
            student_first_name=enrollment.student.first_name,
            student_last_name=enrollment.student.last_name,
            student_date_of_birth=enrollment.student.date_of_birth,
            session_ids=[str(session_id) for session_id in enrollment.session_ids],
            status=enrollment.status.value,
            created_at=enrollment.created_at,
        )
        return enrollment

    def get_enrollment(self, enrollment_id: EnrollmentId) -> Enrollment | None:
        row = (
            models.Enrollment.objects.prefetch_related("reservations")
            .filter(pk=enrollment_id.value)
            .first()
        )
        return _to_enrollment(row) if row else None

    def list_enrollments(self, program_id: ProgramId | None = None) -> list[Enrollment]:
        queryset = models.Enrollment.objects.prefetch_related("reservations")
        if program_id is not None:
            queryset = queryset.filter(program_id=program_id.value)
        return [_to_enrollment(row) for row in queryset.order_by("-created_at")]

    def set_enrollment_status(
        self, enrollment_id: EnrollmentId, status: EnrollmentStatus
    ) -> Enrollment:
        models.Enrollment.objects.filter(pk=enrollment_id.value).update(status=status.value)
        return self.get_enrollment(enrollment_id)
