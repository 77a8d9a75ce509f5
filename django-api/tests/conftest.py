"""Pytest configuration and shared fixtures."""

import uuid

import pytest
from rest_framework.test import APIClient

from enrollment.domain import (
    Capacity,
    ClassSession,
    Offering,
    OfferingId,
    Program,
    ProgramId,
    SessionId,
    SessionType,
    TimeOfDay,
    Weekday,
)
from enrollment.services import build_enrollment_service
from enrollment.stores import InMemoryStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_program():
    def _make(name: str = "Marathon Twice a Week", offering_name: str = "Marathon Program") -> Program:
        return Program(
            id=ProgramId(uuid.uuid4()),
            name=name,
            offering=Offering(id=OfferingId(uuid.uuid4()), name=offering_name),
        )

    return _make


@pytest.fixture
def make_session():
    def _make(
        program_id: ProgramId | None = None,
        weekday: Weekday = Weekday.MONDAY,
        start: str = "16:00",
        end: str = "17:00",
        capacity: int = 10,
        available: int | None = None,
        demo: int = 0,
    ) -> ClassSession:
        return ClassSession(
            id=SessionId(uuid.uuid4()),
            program_id=program_id,
            weekday=weekday,
            start_time=TimeOfDay.parse(start),
            end_time=TimeOfDay.parse(end),
            type=SessionType.WEEKEND if weekday.index >= 5 else SessionType.WEEKDAY,
            regular_capacity=Capacity(capacity),
            available_capacity=Capacity(capacity if available is None else available),
            capacity_demo=Capacity(demo),
            available_demo_capacity=Capacity(demo),
        )

    return _make


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def service(store):
    return build_enrollment_service(store)


@pytest.fixture
def orm_program(db):
    """Create a Program row (and its Offering) in the test database."""
    from enrollment import models

    def _make(name: str = "Marathon Twice a Week", offering_name: str = "Marathon Program"):
        offering = models.Offering.objects.create(name=offering_name)
        return models.Program.objects.create(offering=offering, name=name)

    return _make


@pytest.fixture
def orm_session(db):
    """Create a ClassSession row with every seat available unless told otherwise."""
    from enrollment import models

    def _make(
        program=None,
        weekday: str = "Monday",
        start: str = "16:00",
        end: str = "17:00",
        capacity: int = 10,
        available: int | None = None,
        demo: int = 0,
    ):
        return models.ClassSession.objects.create(
            program=program,
            weekday=weekday,
            start_time=start,
            end_time=end,
            type="weekend" if weekday in ("Saturday", "Sunday") else "weekday",
            regular_capacity=capacity,
            available_capacity=capacity if available is None else available,
            capacity_demo=demo,
            available_demo_capacity=demo,
        )

    return _make
