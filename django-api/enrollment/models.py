"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models


class Offering(models.Model):
    """Persistence model for offerings (Marathon, Sprint, ...)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Program(models.Model):
    """Persistence model for programs."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    offering = models.ForeignKey(Offering, on_delete=models.PROTECT, related_name="programs")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class ClassSession(models.Model):
    """Persistence model for recurring weekly class sessions."""

    class Weekday(models.TextChoices):
        MONDAY = "Monday"
        TUESDAY = "Tuesday"
        WEDNESDAY = "Wednesday"
        THURSDAY = "Thursday"
        FRIDAY = "Friday"
        SATURDAY = "Saturday"
        SUNDAY = "Sunday"

    class Type(models.TextChoices):
        WEEKDAY = "weekday"
        WEEKEND = "weekend"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    program = models.ForeignKey(
        Program,
        on_delete=models.CASCADE,
        related_name="class_sessions",
        null=True,
        blank=True,
    )
    weekday = models.CharField(max_length=9, choices=Weekday.choices)
    start_time = models.CharField(max_length=5)
    end_time = models.CharField(max_length=5)
    type = models.CharField(max_length=7, choices=Type.choices)
    regular_capacity = models.PositiveIntegerField()
    available_capacity = models.PositiveIntegerField()
    capacity_demo = models.PositiveIntegerField(default=0)
    available_demo_capacity = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["program", "weekday", "start_time"], name="class_session_slot_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["program", "weekday", "start_time", "end_time"],
                name="unique_class_session_slot",
            ),
            models.CheckConstraint(
                condition=models.Q(available_capacity__lte=models.F("regular_capacity")),
                name="available_capacity_within_regular",
            ),
            models.CheckConstraint(
                condition=models.Q(available_demo_capacity__lte=models.F("capacity_demo")),
                name="available_demo_within_demo",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.weekday} {self.start_time}-{self.end_time}"


class Enrollment(models.Model):
    """Persistence model for enrollments."""

    class Status(models.TextChoices):
        ACTIVE = "active"
        CANCELLED = "cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    program = models.ForeignKey(Program, on_delete=models.PROTECT, related_name="enrollments")
    student_first_name = models.CharField(max_length=100)
    student_last_name = models.CharField(max_length=100)
    student_date_of_birth = models.DateField()
    session_ids = models.JSONField(default=list)
    status = models.CharField(max_length=9, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="enrollment_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.student_first_name} {self.student_last_name} - {self.program_id}"


class Reservation(models.Model):
    """Persistence model for seats taken from a class session."""

    class SeatKind(models.TextChoices):
        REGULAR = "regular"
        DEMO = "demo"

    class Status(models.TextChoices):
        ACTIVE = "active"
        RELEASED = "released"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.ForeignKey(
        ClassSession, on_delete=models.PROTECT, related_name="reservations"
    )
    enrollment = models.ForeignKey(
        Enrollment,
        on_delete=models.SET_NULL,
        related_name="reservations",
        null=True,
        blank=True,
    )
    seat_kind = models.CharField(max_length=7, choices=SeatKind.choices)
    status = models.CharField(max_length=8, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField()
    released_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["session", "status"], name="reservation_session_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.seat_kind} seat - {self.session_id} ({self.status})"
