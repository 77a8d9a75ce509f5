"""Unit tests for EnrollmentService and SessionDirectory.

These test error handling and domain error mapping against the in-memory store.
Run with: pytest tests/test_services.py -v
"""

import uuid
from datetime import date

import pytest

from enrollment.domain import EnrollmentStatus, SessionScope, StudentInfo, Weekday
from enrollment.domain.errors import (
    IncompleteSelectionError,
    InvalidIdError,
    NotAvailableError,
    ProgramNotFoundError,
    SelectionLimitReachedError,
    SessionFullError,
    SessionInUseError,
    SessionNotFoundError,
    ValidationError,
)
from enrollment.stores import SessionHasReservations

STUDENT = StudentInfo(first_name="Ada", last_name="Lovelace", date_of_birth=date(2014, 12, 10))


@pytest.fixture
def marathon(store, make_program):
    program = make_program("Marathon Twice a Week", "Marathon Program")
    store.load_programs([program])
    return program


@pytest.fixture
def sprint(store, make_program):
    program = make_program("Robotics Sprint", "Sprint")
    store.load_programs([program])
    return program


def available(store, session) -> int:
    return store.get_session(session.id).available_capacity.value


class TestSessionDirectory:
    def test_list_orders_by_weekday_then_start_time(self, store, service, make_session):
        friday = store.add_session(make_session(weekday=Weekday.FRIDAY, start="09:00", end="10:00"))
        late_monday = store.add_session(make_session(start="18:00", end="19:00"))
        early_monday = store.add_session(make_session(start="8:00", end="9:00"))
        sessions = service.list_sessions(SessionScope.global_pool())
        assert [s.id for s in sessions] == [early_monday.id, late_monday.id, friday.id]

    def test_global_pool_excludes_program_scoped_sessions(
        self, store, service, sprint, make_session
    ):
        pooled = store.add_session(make_session())
        store.add_session(make_session(program_id=sprint.id, weekday=Weekday.TUESDAY))
        assert [s.id for s in service.list_sessions(SessionScope.global_pool())] == [pooled.id]

    def test_sessions_for_sprint_program_use_program_scope(
        self, store, service, sprint, make_session
    ):
        store.add_session(make_session())
        own = store.add_session(make_session(program_id=sprint.id, weekday=Weekday.TUESDAY))
        program, sessions = service.sessions_for_program(str(sprint.id))
        assert program == sprint
        assert [s.id for s in sessions] == [own.id]

    def test_unreachable_store_raises_not_available(self, store, service):
        store.available = False
        with pytest.raises(NotAvailableError) as excinfo:
            service.list_sessions(SessionScope.global_pool())
        assert excinfo.value.retriable

    def test_retry_after_outage_succeeds(self, store, service, make_session):
        store.add_session(make_session())
        store.available = False
        with pytest.raises(NotAvailableError):
            service.list_sessions(SessionScope.global_pool())
        store.available = True
        assert len(service.list_sessions(SessionScope.global_pool())) == 1

    def test_add_session_starts_with_every_seat_available(self, service):
        session = service.directory.add_session(
            weekday="Saturday",
            start_time="10:00",
            end_time="11:30",
            type="weekend",
            regular_capacity=8,
            capacity_demo=2,
        )
        assert session.available_capacity.value == 8
        assert session.available_demo_capacity.value == 2
        assert session.program_id is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"weekday": "Someday"},
            {"start_time": "25:00"},
            {"type": "holiday"},
            {"regular_capacity": -1},
            {"start_time": "12:00", "end_time": "11:00"},
        ],
    )
    def test_add_session_validates_fields(self, service, overrides):
        fields = {
            "weekday": "Monday",
            "start_time": "10:00",
            "end_time": "11:00",
            "type": "weekday",
            "regular_capacity": 5,
        }
        fields.update(overrides)
        with pytest.raises(ValidationError):
            service.directory.add_session(**fields)

    def test_add_session_rejects_duplicate_slot(self, service):
        fields = dict(
            weekday="Monday", start_time="10:00", end_time="11:00", type="weekday", regular_capacity=5
        )
        service.directory.add_session(**fields)
        with pytest.raises(ValidationError, match="already exists"):
            service.directory.add_session(**fields)

    def test_add_session_unknown_program(self, service):
        with pytest.raises(ProgramNotFoundError):
            service.directory.add_session(
                weekday="Monday",
                start_time="10:00",
                end_time="11:00",
                type="weekday",
                regular_capacity=5,
                program_id=str(uuid.uuid4()),
            )

    def test_update_session_routes_capacity_through_ledger(self, store, service, make_session):
        session = store.add_session(make_session(capacity=10, available=7))
        updated = service.directory.update_session(
            str(session.id), weekday="Thursday", regular_capacity=12
        )
        assert updated.weekday is Weekday.THURSDAY
        assert updated.regular_capacity.value == 12
        assert updated.available_capacity.value == 9

    def test_update_session_rejects_available_capacity(self, store, service, make_session):
        session = store.add_session(make_session())
        with pytest.raises(ValidationError, match="available_capacity"):
            service.directory.update_session(str(session.id), available_capacity=99)

    def test_delete_session_with_active_reservation_fails(self, store, service, make_session):
        session = store.add_session(make_session())
        service.ledger.reserve(session.id)
        with pytest.raises(SessionInUseError):
            service.directory.delete_session(str(session.id))

    def test_delete_session(self, store, service, make_session):
        session = store.add_session(make_session())
        service.directory.delete_session(str(session.id))
        with pytest.raises(SessionNotFoundError):
            service.directory.get_session(str(session.id))

    def test_delete_session_drops_released_history_and_lock(self, store, service, make_session):
        session = store.add_session(make_session())
        reservation = service.ledger.reserve(session.id)
        service.ledger.release(reservation.id)
        service.directory.delete_session(str(session.id))
        assert store.get_reservation(reservation.id) is None
        assert session.id not in store._session_locks

    def test_store_refuses_to_delete_reserved_session(self, store, service, make_session):
        session = store.add_session(make_session())
        service.ledger.reserve(session.id)
        with pytest.raises(SessionHasReservations):
            store.delete_session(session.id)
        assert store.get_session(session.id) is not None


class TestGetProgram:
    def test_get_program_invalid_id_raises_error(self, service):
        """get_program raises InvalidIdError for malformed UUID."""
        with pytest.raises(InvalidIdError):
            service.get_program("abc")

    def test_get_program_not_found_raises_error(self, service):
        """get_program raises ProgramNotFoundError when store returns None."""
        with pytest.raises(ProgramNotFoundError):
            service.get_program(str(uuid.uuid4()))


class TestCreateEnrollment:
    def test_twice_weekly_marathon_takes_two_seats(self, store, service, marathon, make_session):
        monday = store.add_session(make_session(capacity=4))
        thursday = store.add_session(make_session(weekday=Weekday.THURSDAY, capacity=4))
        enrollment = service.create_enrollment(
            str(marathon.id), STUDENT, [str(monday.id), str(thursday.id)]
        )
        assert enrollment.status is EnrollmentStatus.ACTIVE
        assert enrollment.session_ids == (monday.id, thursday.id)
        assert len(enrollment.reservation_ids) == 2
        assert available(store, monday) == 3
        assert available(store, thursday) == 3
        for reservation_id in enrollment.reservation_ids:
            assert store.get_reservation(reservation_id).enrollment_id == enrollment.id

    def test_too_few_sessions_is_incomplete(self, store, service, marathon, make_session):
        monday = store.add_session(make_session())
        with pytest.raises(IncompleteSelectionError) as excinfo:
            service.create_enrollment(str(marathon.id), STUDENT, [str(monday.id)])
        assert excinfo.value.shortfall == 1
        assert available(store, monday) == 10

    def test_too_many_sessions_hits_limit(self, store, service, sprint, make_session):
        first = store.add_session(make_session(program_id=sprint.id))
        second = store.add_session(make_session(program_id=sprint.id, weekday=Weekday.FRIDAY))
        with pytest.raises(SelectionLimitReachedError):
            service.create_enrollment(str(sprint.id), STUDENT, [str(first.id), str(second.id)])

    def test_duplicate_sessions_rejected(self, store, service, marathon, make_session):
        monday = store.add_session(make_session())
        with pytest.raises(ValidationError, match="only be selected once"):
            service.create_enrollment(str(marathon.id), STUDENT, [str(monday.id)] * 2)

    def test_session_outside_program_scope_rejected(
        self, store, service, sprint, marathon, make_session
    ):
        sprint_session = store.add_session(make_session(program_id=sprint.id))
        pooled = store.add_session(make_session(weekday=Weekday.TUESDAY))
        with pytest.raises(ValidationError, match="not offered"):
            service.create_enrollment(
                str(marathon.id), STUDENT, [str(sprint_session.id), str(pooled.id)]
            )

    def test_missing_student_fields_rejected(self, store, service, sprint, make_session):
        session = store.add_session(make_session(program_id=sprint.id))
        student = StudentInfo(first_name="Ada", last_name=" ", date_of_birth=date(2014, 1, 1))
        with pytest.raises(ValidationError):
            service.create_enrollment(str(sprint.id), student, [str(session.id)])

    def test_full_session_creates_no_enrollment(self, store, service, sprint, make_session):
        session = store.add_session(make_session(program_id=sprint.id, capacity=1, available=0))
        with pytest.raises(SessionFullError):
            service.create_enrollment(str(sprint.id), STUDENT, [str(session.id)])
        assert service.list_enrollments() == []
        assert available(store, session) == 0

    def test_failed_second_reservation_rolls_back_first(
        self, store, service, marathon, make_session, caplog
    ):
        open_session = store.add_session(make_session(capacity=3))
        full_session = store.add_session(
            make_session(weekday=Weekday.SATURDAY, capacity=1, available=0)
        )
        with pytest.raises(SessionFullError):
            service.create_enrollment(
                str(marathon.id), STUDENT, [str(open_session.id), str(full_session.id)]
            )
        assert available(store, open_session) == 3
        assert not store.has_active_reservations(open_session.id)
        assert service.list_enrollments() == []
        assert "rolled back" in caplog.text


class TestCancelEnrollment:
    def test_cancel_releases_every_seat(self, store, service, marathon, make_session):
        monday = store.add_session(make_session(capacity=2))
        friday = store.add_session(make_session(weekday=Weekday.FRIDAY, capacity=2))
        enrollment = service.create_enrollment(
            str(marathon.id), STUDENT, [str(monday.id), str(friday.id)]
        )
        cancelled = service.cancel_enrollment(str(enrollment.id))
        assert cancelled.status is EnrollmentStatus.CANCELLED
        assert available(store, monday) == 2
        assert available(store, friday) == 2

    def test_cancel_twice_is_a_no_op(self, store, service, sprint, make_session):
        session = store.add_session(make_session(program_id=sprint.id, capacity=2))
        enrollment = service.create_enrollment(str(sprint.id), STUDENT, [str(session.id)])
        service.cancel_enrollment(str(enrollment.id))
        service.cancel_enrollment(str(enrollment.id))
        assert available(store, session) == 2

    def test_list_enrollments_filters_by_program(self, store, service, sprint, marathon, make_session):
        session = store.add_session(make_session(program_id=sprint.id))
        service.create_enrollment(str(sprint.id), STUDENT, [str(session.id)])
        assert len(service.list_enrollments(str(sprint.id))) == 1
        assert service.list_enrollments(str(marathon.id)) == []
