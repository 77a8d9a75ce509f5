"""Unit tests for CapacityLedger against the in-memory store.

Run with: pytest tests/test_capacity_ledger.py -v
"""

import threading
import uuid

import pytest

from enrollment.domain import ReservationStatus, SeatKind
from enrollment.domain.errors import (
    InvalidIdError,
    ReservationNotFoundError,
    SessionFullError,
    SessionNotFoundError,
    ValidationError,
)


@pytest.fixture
def ledger(service):
    return service.ledger


def available(store, session) -> int:
    return store.get_session(session.id).available_capacity.value


class TestReserve:
    def test_reserve_decrements_available_capacity(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=3))
        reservation = ledger.reserve(session.id)
        assert reservation.status is ReservationStatus.ACTIVE
        assert reservation.session_id == session.id
        assert available(store, session) == 2

    def test_reserve_accepts_string_id(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=1))
        ledger.reserve(str(session.id))
        assert available(store, session) == 0

    def test_reserve_on_full_session_fails_without_mutation(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=1, available=0))
        with pytest.raises(SessionFullError):
            ledger.reserve(session.id)
        assert available(store, session) == 0
        assert not store.has_active_reservations(session.id)

    def test_reserve_unknown_session(self, ledger):
        with pytest.raises(SessionNotFoundError):
            ledger.reserve(str(uuid.uuid4()))

    def test_reserve_invalid_id(self, ledger):
        with pytest.raises(InvalidIdError):
            ledger.reserve("not-a-uuid")

    def test_demo_seats_use_their_own_pool(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=1, available=0, demo=1))
        ledger.reserve(session.id, SeatKind.DEMO)
        current = store.get_session(session.id)
        assert current.available_demo_capacity.value == 0
        assert current.available_capacity.value == 0
        with pytest.raises(SessionFullError):
            ledger.reserve(session.id, SeatKind.DEMO)

    def test_reserve_logs_the_reservation(self, store, ledger, make_session, caplog):
        session = store.add_session(make_session(capacity=1))
        with caplog.at_level("INFO", logger="enrollment"):
            ledger.reserve(session.id)
        assert "Reserved regular seat" in caplog.text


class TestRelease:
    def test_release_restores_pre_reserve_value(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=5, available=4))
        reservation = ledger.reserve(session.id)
        released = ledger.release(reservation.id)
        assert released.status is ReservationStatus.RELEASED
        assert released.released_at is not None
        assert available(store, session) == 4

    def test_release_twice_is_a_no_op(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=2))
        reservation = ledger.reserve(session.id)
        ledger.release(reservation.id)
        ledger.release(reservation.id)
        assert available(store, session) == 2

    def test_release_never_exceeds_regular_capacity(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=2))
        reservation = ledger.reserve(session.id)
        store.return_seat(session.id, SeatKind.REGULAR)
        ledger.release(reservation.id)
        assert available(store, session) == 2

    def test_release_unknown_reservation(self, ledger):
        with pytest.raises(ReservationNotFoundError):
            ledger.release(str(uuid.uuid4()))

    def test_capacity_stays_in_bounds_across_cycles(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=3))
        held = []
        for step in range(20):
            if step % 3 == 2 and held:
                ledger.release(held.pop(0).id)
            else:
                try:
                    held.append(ledger.reserve(session.id))
                except SessionFullError:
                    pass
            current = store.get_session(session.id)
            assert 0 <= current.available_capacity.value <= current.regular_capacity.value
        assert available(store, session) == 3 - len(held)


class TestResize:
    def test_growing_capacity_adds_available_seats(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=10, available=4))
        resized = ledger.resize(session.id, regular_capacity=12)
        assert resized.regular_capacity.value == 12
        assert resized.available_capacity.value == 6

    def test_shrinking_capacity_clamps_at_zero(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=10, available=2))
        resized = ledger.resize(session.id, regular_capacity=5)
        assert resized.available_capacity.value == 0

    def test_resize_rejects_negative_totals(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=10))
        with pytest.raises(ValidationError):
            ledger.resize(session.id, regular_capacity=4, capacity_demo=-1)
        assert store.get_session(session.id).regular_capacity.value == 10

    def test_resize_unknown_session(self, ledger):
        with pytest.raises(SessionNotFoundError):
            ledger.resize(str(uuid.uuid4()), regular_capacity=3)


class TestConcurrentReservations:
    def test_last_seat_goes_to_exactly_one_caller(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=5, available=1))
        barrier = threading.Barrier(2)
        outcomes = []

        def attempt():
            barrier.wait()
            try:
                ledger.reserve(session.id)
                outcomes.append("reserved")
            except SessionFullError:
                outcomes.append("full")

        threads = [threading.Thread(target=attempt) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["full", "reserved"]
        assert available(store, session) == 0

    def test_many_callers_never_oversell(self, store, ledger, make_session):
        session = store.add_session(make_session(capacity=5))
        barrier = threading.Barrier(20)
        reserved = []

        def attempt():
            barrier.wait()
            try:
                reserved.append(ledger.reserve(session.id))
            except SessionFullError:
                pass

        threads = [threading.Thread(target=attempt) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(reserved) == 5
        assert available(store, session) == 0
